#!/usr/bin/env python
import os
from sdk.billclient import BillClient

def main():
    c = BillClient(base_url=os.getenv("CARTBILL_API_URL", "http://127.0.0.1:3000/api"))

    print(c.health())

    # -----------------------------
    # Register products
    # -----------------------------
    print("\nCreating products...")
    print(c.create_product("CEM-50", "Portland cement 50kg", "bag", 420))
    print(c.create_product("TMT-12", "TMT steel bar 12mm", "kg", 68.5))
    print(c.create_product("SAND-R", "River sand", "cft", 55))

    # -----------------------------
    # Partial update
    # -----------------------------
    print("\nRaising cement price...")
    print(c.update_product("CEM-50", price=435))

    print("\nListing products...")
    for p in c.list_products():
        print(p)

    # -----------------------------
    # Download a bill; the unknown code is skipped
    # -----------------------------
    print("\nDownloading bill...")
    filename, content = c.download_bill(
        [
            {"itemCode": "CEM-50", "qty": 10},
            {"itemCode": "TMT-12", "qty": "120"},
            {"itemCode": "NOPE", "qty": 3},
        ],
        meta={"invoiceNo": "DEMO-001", "customer": "Walk-in"},
        dest=".",
    )
    print(f"Saved {filename} ({len(content)} bytes)")

    print("\nRemoving sand...")
    print(c.delete_product("SAND-R"))

if __name__ == "__main__":
    main()
