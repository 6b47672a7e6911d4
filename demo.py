#!/usr/bin/env python
from bakery_ledger.exceptions import InvalidOperation
from sdk.ledgerclient import LedgerClient


def main():
    c = LedgerClient(base_url="http://127.0.0.1:8085")

    # -----------------------------
    # Clear products (the id counter keeps going)
    # -----------------------------
    print("Clearing products...")
    c.clear_all_products()

    # -----------------------------
    # Add products
    # -----------------------------
    print("\nAdding products...")
    muffin = c.add_product("Muffin", 10, "Bakery")
    cake = c.add_product("Black Forest", 2, "Cake")
    print(muffin)
    print(cake)

    # -----------------------------
    # Stock movements
    # -----------------------------
    pid = muffin["id"]
    print("\nAdding 5 muffins...")
    print(c.add_quantity(pid, 5))

    print("\nTrying to offload 20 muffins...")
    try:
        c.offload_quantity(pid, 20)
    except InvalidOperation as e:
        print(f"Rejected: {e.msg}")

    print("\nOffloading the remaining 15...")
    print(c.offload_quantity(pid, 15))

    print("\nTrying to offload one more...")
    try:
        c.offload_quantity(pid, 1)
    except InvalidOperation as e:
        print(f"Rejected: {e.msg}")

    # -----------------------------
    # Queries
    # -----------------------------
    print("\nStock for muffins:", c.get_stock(pid))
    print("\nCakes:")
    print(c.search_by_category("Cake"))
    print("\nAll products:")
    print(c.list_all_products())


if __name__ == "__main__":
    main()
