# sdk/ledgerclient.py
import requests
import httpx
from typing import Any, Dict, List, Optional
from rich import print

from bakery_ledger.exceptions import from_tagged


def _raise_for_ledger_error(status_code: int, body: Any) -> None:
    # 400/404 carry a tagged body such as {"NotFound": {"msg": ...}}
    if status_code in (400, 404):
        err = from_tagged(body)
        if err is not None:
            raise err


def _json_or_none(r) -> Any:
    try:
        return r.json()
    except ValueError:
        return None


class LedgerClient:
    def __init__(self, base_url: str = "http://localhost:8085", timeout: int = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _unwrap(self, r):
        _raise_for_ledger_error(r.status_code, _json_or_none(r))
        r.raise_for_status()
        return r.json()

    def _product_url(self, product_id: int, suffix: str = "") -> str:
        return f"{self.base_url}/products/{int(product_id)}{suffix}"

    # Queries
    def get_product(self, product_id: int) -> Dict[str, Any]:
        r = self.session.get(self._product_url(product_id), timeout=self.timeout)
        return self._unwrap(r)

    def get_stock(self, product_id: int) -> int:
        r = self.session.get(self._product_url(product_id, "/stock"), timeout=self.timeout)
        return self._unwrap(r)["quantity"]

    def list_all_products(self) -> List[Dict[str, Any]]:
        r = self.session.get(f"{self.base_url}/products", timeout=self.timeout)
        return self._unwrap(r)

    def search_by_category(self, category: str) -> List[Dict[str, Any]]:
        r = self.session.get(f"{self.base_url}/products/search", params={"category": category}, timeout=self.timeout)
        return self._unwrap(r)

    # Products
    def add_product(self, name: str, quantity: int, category: str = "Bakery") -> Dict[str, Any]:
        r = self.session.post(f"{self.base_url}/products", json={
            "name": name, "quantity": quantity, "category": category
        }, timeout=self.timeout)
        return self._unwrap(r)

    def update_product(self, product_id: int, name: str, quantity: int, category: str = "Bakery") -> Dict[str, Any]:
        r = self.session.put(self._product_url(product_id), json={
            "name": name, "quantity": quantity, "category": category
        }, timeout=self.timeout)
        return self._unwrap(r)

    def remove_product(self, product_id: int) -> Dict[str, Any]:
        r = self.session.delete(self._product_url(product_id), timeout=self.timeout)
        return self._unwrap(r)

    def clear_all_products(self) -> None:
        r = self.session.post(f"{self.base_url}/reset", timeout=self.timeout)
        self._unwrap(r)

    # Stock
    def add_quantity(self, product_id: int, amount: int) -> Dict[str, Any]:
        r = self.session.post(self._product_url(product_id, "/stock/add"), json={"amount": amount}, timeout=self.timeout)
        return self._unwrap(r)

    def offload_quantity(self, product_id: int, amount: int) -> Dict[str, Any]:
        r = self.session.post(self._product_url(product_id, "/stock/offload"), json={"amount": amount}, timeout=self.timeout)
        return self._unwrap(r)

    # Async offload (example)
    async def offload_quantity_async(self, product_id: int, amount: int) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self._product_url(product_id, "/stock/offload"), json={"amount": amount})
        _raise_for_ledger_error(r.status_code, _json_or_none(r))
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Bakery ledger client")
    parser.add_argument("--base-url", default="http://127.0.0.1:8085", help="Ledger service URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Query commands
    # ---------------------------
    subparsers.add_parser("list-products", help="List all products")

    sp = subparsers.add_parser("search", help="List products in a category")
    sp.add_argument("--category", required=True, choices=["Bakery", "Cake", "Cookies"])

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", type=int, required=True)

    gs = subparsers.add_parser("get-stock", help="Get the quantity in stock for a product")
    gs.add_argument("--product-id", type=int, required=True)

    # ---------------------------
    # Product commands
    # ---------------------------
    ap = subparsers.add_parser("add-product", help="Add a new product")
    ap.add_argument("--name", required=True, help="Product name")
    ap.add_argument("--quantity", type=int, required=True, help="Initial quantity")
    ap.add_argument("--category", default="Bakery", choices=["Bakery", "Cake", "Cookies"])

    up = subparsers.add_parser("update-product", help="Replace a product's name, quantity and category")
    up.add_argument("--product-id", type=int, required=True)
    up.add_argument("--name", required=True)
    up.add_argument("--quantity", type=int, required=True)
    up.add_argument("--category", default="Bakery", choices=["Bakery", "Cake", "Cookies"])

    rp = subparsers.add_parser("remove-product", help="Delete a product")
    rp.add_argument("--product-id", type=int, required=True)

    subparsers.add_parser("clear", help="Delete every product")

    # ---------------------------
    # Stock commands
    # ---------------------------
    aq = subparsers.add_parser("add-stock", help="Add stock to a product")
    aq.add_argument("--product-id", type=int, required=True)
    aq.add_argument("--amount", type=int, required=True)

    oq = subparsers.add_parser("offload-stock", help="Remove stock from a product")
    oq.add_argument("--product-id", type=int, required=True)
    oq.add_argument("--amount", type=int, required=True)

    # ---------------------------
    # Parse and execute
    # ---------------------------
    args = parser.parse_args()
    c = LedgerClient(base_url=args.base_url)

    if args.command == "list-products":
        print(c.list_all_products())
    elif args.command == "search":
        print(c.search_by_category(args.category))
    elif args.command == "get-product":
        print(c.get_product(args.product_id))
    elif args.command == "get-stock":
        print(c.get_stock(args.product_id))
    elif args.command == "add-product":
        print(c.add_product(args.name, args.quantity, args.category))
    elif args.command == "update-product":
        print(c.update_product(args.product_id, args.name, args.quantity, args.category))
    elif args.command == "remove-product":
        print(c.remove_product(args.product_id))
    elif args.command == "clear":
        c.clear_all_products()
        print("[green]All products cleared[/green]")
    elif args.command == "add-stock":
        print(c.add_quantity(args.product_id, args.amount))
    elif args.command == "offload-stock":
        print(c.offload_quantity(args.product_id, args.amount))
