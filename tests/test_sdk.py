# tests/test_sdk.py
import asyncio
import io

import httpx
import pytest
from openpyxl import load_workbook

from cartbill.main import app
from sdk.billclient import BillClient

@pytest.fixture
def sdk(client):
    return BillClient(base_url="http://testserver", session=client)

def test_product_crud_through_sdk(sdk):
    assert sdk.health() == "API running"
    created = sdk.create_product("TMT-12", "Steel bar 12mm", "kg", 68.5)
    assert created["id"] == "TMT-12"
    assert sdk.get_product("TMT-12")["price"] == 68.5
    assert sdk.update_product("TMT-12", unit="ton")["unit"] == "ton"
    assert [p["id"] for p in sdk.list_products()] == ["TMT-12"]
    assert sdk.delete_product("TMT-12") == {"success": True}
    with pytest.raises(httpx.HTTPStatusError):
        sdk.get_product("TMT-12")

def test_download_bill_writes_file(sdk, tmp_path):
    sdk.create_product("A", price=3)
    filename, content = sdk.download_bill([{"itemCode": "A", "qty": 2}], {"invoiceNo": "INV-9"}, dest=str(tmp_path))
    assert filename == "bill_INV-9.xlsx"
    saved = tmp_path / filename
    assert saved.read_bytes() == content
    assert load_workbook(io.BytesIO(content)).active["G8"].value == 6

def test_download_bill_async(store):
    asyncio.run(store.set("products", "A", {"itemCode": "A", "price": 5}))
    sdk = BillClient(base_url="http://test")
    filename, content = asyncio.run(sdk.download_bill_async(
        [{"itemCode": "A", "qty": 1}], transport=httpx.ASGITransport(app=app),
    ))
    assert filename == "bill.xlsx"
    assert load_workbook(io.BytesIO(content)).active["G6"].value == 5

def test_download_bill_with_slash_in_invoice_number(sdk, tmp_path):
    sdk.create_product("A", price=1)
    filename, content = sdk.download_bill([{"itemCode": "A", "qty": 1}], {"invoiceNo": "2026/07"}, dest=str(tmp_path))
    assert filename == "bill_2026_07.xlsx"
    assert (tmp_path / "bill_2026_07.xlsx").read_bytes() == content

def test_download_bill_non_ascii_name(sdk, tmp_path):
    sdk.create_product("A", price=1)
    filename, _ = sdk.download_bill([{"itemCode": "A", "qty": 1}], {"invoiceNo": "बिल-1"}, dest=str(tmp_path))
    assert filename == "bill_बिल-1.xlsx"
    assert (tmp_path / filename).exists()
