"""
Invoice compiler: resolves bill line requests against the product store and
renders the result as a single-sheet xlsx workbook.
"""

import io
import re
import logging
from datetime import date, datetime
from typing import List, Optional
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from .core import BillLineIn, BillMeta, to_quantity
from .database import DocumentStore
from .models import Bill, BillLine, Product

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = [
    ("S.No", 6),
    ("Item Code", 18),
    ("Description", 40),
    ("Unit", 10),
    ("Price", 12),
    ("Quantity", 10),
    ("Total", 14),
]
PRICE_COL = 5
TOTAL_COL = 7
DESCRIPTION_COL = 3

TITLE_ROW = 1
META_ROW = 3
HEADER_ROW = 5


async def compile_bill(store: DocumentStore, collection: str, items: List[BillLineIn]) -> Bill:
    """Fetch each requested product in order. Unknown item codes are dropped."""
    bill = Bill()
    for item in items:
        code = "" if item.itemCode is None else str(item.itemCode)
        data = await store.get(collection, code) if code else None
        if data is None:
            logger.debug("Skipping unknown item code %r", code)
            bill.dropped.append(code)
            continue
        product = Product(
            id=code,
            itemCode=str(data.get("itemCode") or code),
            description=data.get("description") or "",
            unit=data.get("unit") or "",
            price=to_quantity(data.get("price")),
        )
        qty = to_quantity(item.qty)
        total = qty * product.price
        bill.lines.append(BillLine(
            itemCode=product.itemCode,
            description=product.description,
            unit=product.unit,
            price=product.price,
            quantity=qty,
            total=total,
        ))
        bill.grand_total += total
    return bill


def currency_format(symbol: str) -> str:
    return f'"{symbol}"#,##0.00'


def render_bill(bill: Bill, meta: BillMeta, shop_name: str, currency_symbol: str) -> Workbook:
    wb = Workbook()
    wb.properties.creator = shop_name
    wb.properties.created = datetime.now()
    ws = wb.active
    ws.title = "Bill"

    last_col = get_column_letter(len(COLUMNS))
    ws.merge_cells(f"A{TITLE_ROW}:{last_col}{TITLE_ROW}")
    title = ws.cell(row=TITLE_ROW, column=1, value=meta.shopName or shop_name)
    title.font = Font(size=14, bold=True)
    title.alignment = Alignment(horizontal="center", vertical="center")

    date_str = meta.date or date.today().strftime("%d/%m/%Y")
    for col, label, value in (
        (1, "Invoice No:", meta.invoiceNo),
        (4, "Customer:", meta.customer),
        (7, "Date:", date_str),
    ):
        ws.cell(row=META_ROW, column=col, value=label)
        ws.cell(row=META_ROW, column=col + 1, value=value or None)

    thin = Side(style="thin")
    box = Border(left=thin, right=thin, top=thin, bottom=thin)
    for col, (header, width) in enumerate(COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width
        cell = ws.cell(row=HEADER_ROW, column=col, value=header)
        cell.font = Font(bold=True)
        cell.border = box

    row = HEADER_ROW
    for sno, line in enumerate(bill.lines, start=1):
        row += 1
        values = [sno, line.itemCode, line.description, line.unit, line.price, line.quantity, line.total]
        for col, value in enumerate(values, start=1):
            ws.cell(row=row, column=col, value=value)

    # one blank row before the totals
    row += 2
    bold = Font(bold=True)
    ws.cell(row=row, column=DESCRIPTION_COL, value="GRAND TOTAL").font = bold
    ws.cell(row=row, column=TOTAL_COL, value=bill.grand_total).font = bold

    fmt = currency_format(currency_symbol)
    for r in range(HEADER_ROW + 1, ws.max_row + 1):
        for col in (PRICE_COL, TOTAL_COL):
            cell = ws.cell(row=r, column=col)
            if isinstance(cell.value, (int, float)) and not isinstance(cell.value, bool):
                cell.number_format = fmt
    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def bill_filename(invoice_no: Optional[str]) -> str:
    return f"bill_{invoice_no}.xlsx" if invoice_no else "bill.xlsx"


_UNSAFE_HEADER_CHARS = re.compile(r"[^\x20-\x7e]")


def content_disposition(filename: str) -> str:
    """Attachment header. Non-ASCII names get an RFC 5987 filename* next to an ASCII fallback."""
    fallback = _UNSAFE_HEADER_CHARS.sub("_", filename)
    if fallback == filename:
        return f"attachment; filename={filename}"
    return f"attachment; filename={fallback}; filename*=UTF-8''{quote(filename, safe='')}"
