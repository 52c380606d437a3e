# sdk/billclient.py
import re
import requests
import httpx
from pathlib import Path
from urllib.parse import unquote
from typing import Any, Dict, List, Optional, Tuple

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')
_FILENAME_STAR_RE = re.compile(r"filename\*=UTF-8''([^;]+)", re.IGNORECASE)


def _filename_from(headers, default: str = "bill.xlsx") -> str:
    disposition = headers.get("content-disposition", "")
    match = _FILENAME_STAR_RE.search(disposition)
    if match:
        return unquote(match.group(1).strip())
    match = _FILENAME_RE.search(disposition)
    return match.group(1) if match else default


def _safe_filename(name: str) -> str:
    # invoice numbers may carry path separators, e.g. "2026/07"
    return Path(name.replace("\\", "_").replace("/", "_")).name or "bill.xlsx"


class BillClient:
    def __init__(self, base_url: str = "http://localhost:3000/api", api_key: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        # any requests-compatible session works, e.g. FastAPI's TestClient
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def health(self) -> str:
        r = self.session.get(f"{self.base_url}/", timeout=self.timeout)
        r.raise_for_status()
        return r.text

    # Products
    def list_products(self) -> List[Dict[str, Any]]:
        r = self.session.get(f"{self.base_url}/products", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, item_code: str) -> Dict[str, Any]:
        r = self.session.get(f"{self.base_url}/products/{item_code}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def create_product(self, item_code: str, description: str = "", unit: str = "", price: float = 0):
        r = self.session.post(f"{self.base_url}/products", json={
            "itemCode": item_code, "description": description, "unit": unit, "price": price
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, item_code: str, **fields):
        r = self.session.put(f"{self.base_url}/products/{item_code}", json=fields, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, item_code: str):
        r = self.session.delete(f"{self.base_url}/products/{item_code}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Bill
    def download_bill(self, items: List[Dict[str, Any]], meta: Optional[Dict[str, Any]] = None,
                      dest: Optional[str] = None) -> Tuple[str, bytes]:
        """
        POST the items and return (filename, xlsx bytes). When dest is a directory
        the file is written there under the server-supplied name; any other dest
        is used as the output path.
        """
        payload: Dict[str, Any] = {"items": items}
        if meta:
            payload["meta"] = meta
        r = self.session.post(f"{self.base_url}/bill/download", json=payload, timeout=self.timeout)
        r.raise_for_status()
        filename = _safe_filename(_filename_from(r.headers))
        if dest is not None:
            path = Path(dest)
            if path.is_dir():
                path = path / filename
            path.write_bytes(r.content)
        return filename, r.content

    async def download_bill_async(self, items: List[Dict[str, Any]], meta: Optional[Dict[str, Any]] = None,
                                  transport: Optional[httpx.AsyncBaseTransport] = None) -> Tuple[str, bytes]:
        payload: Dict[str, Any] = {"items": items}
        if meta:
            payload["meta"] = meta
        async with httpx.AsyncClient(timeout=self.timeout, transport=transport) as client:
            r = await client.post(f"{self.base_url}/bill/download", json=payload)
            r.raise_for_status()
            return _safe_filename(_filename_from(r.headers)), r.content


def _parse_item(raw: str) -> Dict[str, Any]:
    code, _, qty = raw.partition(":")
    return {"itemCode": code, "qty": qty or 1}


if __name__ == "__main__":
    import argparse
    import os
    from rich import print

    parser = argparse.ArgumentParser(description="cartbill client")
    parser.add_argument("--url", default=os.getenv("CARTBILL_API_URL", "http://127.0.0.1:3000/api"))
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-products", help="List all products")

    gp = subparsers.add_parser("get-product", help="Get a product by item code")
    gp.add_argument("--item-code", required=True)

    cp = subparsers.add_parser("create-product", help="Create or overwrite a product")
    cp.add_argument("--item-code", required=True)
    cp.add_argument("--description", default="")
    cp.add_argument("--unit", default="")
    cp.add_argument("--price", type=float, default=0)

    up = subparsers.add_parser("update-product", help="Update some fields of a product")
    up.add_argument("--item-code", required=True)
    up.add_argument("--description")
    up.add_argument("--unit")
    up.add_argument("--price", type=float)

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--item-code", required=True)

    bp = subparsers.add_parser("download-bill", help="Download an xlsx bill")
    bp.add_argument("items", nargs="+", help="CODE:QTY pairs")
    bp.add_argument("--invoice-no")
    bp.add_argument("--customer")
    bp.add_argument("--shop-name")
    bp.add_argument("--date")
    bp.add_argument("--out", default=".")

    args = parser.parse_args()
    c = BillClient(base_url=args.url)

    if args.command == "list-products":
        print(c.list_products())
    elif args.command == "get-product":
        print(c.get_product(args.item_code))
    elif args.command == "create-product":
        print(c.create_product(args.item_code, args.description, args.unit, args.price))
    elif args.command == "update-product":
        fields = {k: v for k, v in (("description", args.description), ("unit", args.unit), ("price", args.price)) if v is not None}
        print(c.update_product(args.item_code, **fields))
    elif args.command == "delete-product":
        print(c.delete_product(args.item_code))
    elif args.command == "download-bill":
        meta = {k: v for k, v in (("invoiceNo", args.invoice_no), ("customer", args.customer),
                                  ("shopName", args.shop_name), ("date", args.date)) if v}
        filename, content = c.download_bill([_parse_item(i) for i in args.items], meta, dest=args.out)
        print(f"[green]Saved {filename}[/green] ({len(content)} bytes)")
