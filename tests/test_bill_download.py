# tests/test_bill_download.py
import io
from datetime import date
from urllib.parse import quote

from openpyxl import load_workbook

from cartbill.invoice import XLSX_MIME

def _sheet(resp):
    return load_workbook(io.BytesIO(resp.content)).active

def test_missing_items_are_dropped(client, seed):
    seed("A", description="Brick", unit="pcs", price=10.00)
    r = client.post("/bill/download", json={
        "items": [{"itemCode": "A", "qty": 2}, {"itemCode": "MISSING", "qty": 5}],
        "meta": {"invoiceNo": "INV-1", "customer": "Ravi", "date": "01/02/2026"},
    })
    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX_MIME
    assert r.headers["content-disposition"] == "attachment; filename=bill_INV-1.xlsx"

    ws = _sheet(r)
    assert [c.value for c in ws[6]][:7] == [1, "A", "Brick", "pcs", 10, 2, 20]
    # row 7 blank, row 8 totals
    assert all(c.value is None for c in ws[7])
    assert ws["C8"].value == "GRAND TOTAL"
    assert ws["G8"].value == 20
    assert ws.max_row == 8

def test_layout_and_formats(client, seed, monkeypatch):
    monkeypatch.setenv("SHOP_NAME", "Ganesh Hardware")
    monkeypatch.setenv("CURRENCY_SYMBOL", "$")
    seed("A", price=1.5)
    ws = _sheet(client.post("/bill/download", json={"items": [{"itemCode": "A", "qty": 4}]}))

    assert ws.title == "Bill"
    assert "A1:G1" in [str(rng) for rng in ws.merged_cells.ranges]
    assert ws["A1"].value == "Ganesh Hardware"
    assert ws["A1"].font.bold and ws["A1"].font.size == 14
    assert ws["A1"].alignment.horizontal == "center"

    assert [ws.cell(row=3, column=c).value for c in (1, 4, 7)] == ["Invoice No:", "Customer:", "Date:"]
    assert ws["H3"].value == date.today().strftime("%d/%m/%Y")

    headers = [c.value for c in ws[5]][:7]
    assert headers == ["S.No", "Item Code", "Description", "Unit", "Price", "Quantity", "Total"]
    for cell in ws[5][:7]:
        assert cell.font.bold
        assert {cell.border.left.style, cell.border.right.style, cell.border.top.style, cell.border.bottom.style} == {"thin"}

    fmt = '"$"#,##0.00'
    assert ws["E6"].number_format == fmt
    assert ws["G6"].number_format == fmt
    assert ws["G8"].number_format == fmt
    assert ws["G8"].font.bold
    assert ws["G8"].value == 6

def test_meta_shop_name_overrides_env(client, seed):
    seed("A", price=1)
    ws = _sheet(client.post("/bill/download", json={"items": [{"itemCode": "A", "qty": 1}], "meta": {"shopName": "Corner Store"}}))
    assert ws["A1"].value == "Corner Store"

def test_quantity_coercion(client, seed):
    seed("A", price=7)
    ws = _sheet(client.post("/bill/download", json={"items": [{"itemCode": "A", "qty": "3"}, {"itemCode": "A", "qty": "abc"}]}))
    assert ws["F6"].value == 3 and ws["G6"].value == 21
    assert ws["F7"].value == 0 and ws["G7"].value == 0
    assert ws["G9"].value == 21

def test_default_filename(client, seed):
    seed("A")
    r = client.post("/bill/download", json={"items": [{"itemCode": "A", "qty": 1}]})
    assert r.headers["content-disposition"] == "attachment; filename=bill.xlsx"

def test_items_required(client):
    for body in ({}, {"items": []}, {"items": None}):
        r = client.post("/bill/download", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Items required"}

def test_no_resolvable_items_still_renders(client):
    r = client.post("/bill/download", json={"items": [{"itemCode": "GHOST", "qty": 1}]})
    assert r.status_code == 200
    ws = _sheet(r)
    assert ws["C7"].value == "GRAND TOTAL"
    assert ws["G7"].value == 0

def test_non_ascii_invoice_number_downloads(client, seed):
    seed("A", price=10)
    r = client.post("/bill/download", json={"items": [{"itemCode": "A", "qty": 1}], "meta": {"invoiceNo": "बिल-1"}})
    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX_MIME
    disposition = r.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=bill____-1.xlsx; ")
    assert disposition.endswith("filename*=UTF-8''" + quote("bill_बिल-1.xlsx", safe=""))
    assert _sheet(r)["B3"].value == "बिल-1"

def test_numeric_meta_values_are_accepted(client, seed):
    seed("A", price=1)
    r = client.post("/bill/download", json={
        "items": [{"itemCode": "A", "qty": 1}],
        "meta": {"invoiceNo": 123, "customer": 42, "date": 20260716},
    })
    assert r.status_code == 200
    assert r.headers["content-disposition"] == "attachment; filename=bill_123.xlsx"
    ws = _sheet(r)
    assert [ws["B3"].value, ws["E3"].value, ws["H3"].value] == ["123", "42", "20260716"]
