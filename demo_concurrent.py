import asyncio

from bakery_ledger.exceptions import InvalidOperation, NotFound
from sdk.ledgerclient import LedgerClient


async def simulate_offload(client, who, product_id, amount):
    try:
        product = await client.offload_quantity_async(product_id, amount)
        print(f"✅ {who} offloaded {amount} units, {product['quantity']} left")
    except InvalidOperation as e:
        print(f"❌ {who} was refused: {e.msg}")
    except NotFound as e:
        print(f"❌ {who} failed: {e.msg}")


async def main():
    c = LedgerClient(base_url="http://127.0.0.1:8085")

    product = c.add_product("Sourdough", 2, "Bakery")
    product_id = product["id"]
    print(f"\n🍞 Added product: {product}")

    # Both shops want the last two loaves
    print("\n⚡ Simulating concurrent offloads...")
    await asyncio.gather(
        simulate_offload(c, "north-shop", product_id, 2),
        simulate_offload(c, "south-shop", product_id, 2),
    )

    print("\n📦 Final product state:", c.get_product(product_id))


if __name__ == "__main__":
    asyncio.run(main())
