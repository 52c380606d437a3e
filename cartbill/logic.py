import logging
from functools import wraps
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from .config import load_settings
from .core import (
    ProductIn, ProductUpdate, BillRequest, BillMeta,
    UPDATABLE_FIELDS, to_price, _make_product_dict
)
from .database import DocumentStore
from .invoice import compile_bill, render_bill, workbook_bytes, bill_filename, content_disposition

# This file contains the core logic for all API endpoints.

logger = logging.getLogger(__name__)


def reported(fn):
    """Let HTTPException through; anything else becomes a 500 carrying its message."""
    @wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("%s failed", fn.__name__)
            raise HTTPException(status_code=500, detail=str(e)) from e
    return wrapper


def _collection() -> str:
    return load_settings().products_collection


async def _require(store: DocumentStore, product_id: str) -> Dict[str, Any]:
    data = await store.get(_collection(), product_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return data


# Product endpoints
@reported
async def list_products_logic(store: DocumentStore) -> List[Dict[str, Any]]:
    docs = await store.list(_collection())
    data = [_make_product_dict(doc_id, doc) for doc_id, doc in docs]
    logger.info("Fetched products: %d", len(data))
    return data

@reported
async def get_product_logic(store: DocumentStore, product_id: str) -> Dict[str, Any]:
    return _make_product_dict(product_id, await _require(store, product_id))

@reported
async def create_product_logic(store: DocumentStore, payload: ProductIn) -> Dict[str, Any]:
    if payload.itemCode is None or payload.itemCode == "":
        raise HTTPException(status_code=400, detail="itemCode required")
    try:
        price = to_price(payload.price)
    except ValueError:
        raise HTTPException(status_code=400, detail="price must be a non-negative number")

    item_code = str(payload.itemCode)
    await store.set(_collection(), item_code, {
        "itemCode": item_code,
        "description": payload.description,
        "unit": payload.unit,
        "price": price,
    })
    logger.info("Stored product %s", item_code)
    return _make_product_dict(item_code, await _require(store, item_code))

@reported
async def update_product_logic(store: DocumentStore, product_id: str, payload: ProductUpdate) -> Dict[str, Any]:
    updates = {k: getattr(payload, k) for k in UPDATABLE_FIELDS if k in payload.model_fields_set}
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    if "price" in updates:
        try:
            updates["price"] = to_price(updates["price"])
        except ValueError:
            raise HTTPException(status_code=400, detail="price must be a non-negative number")
    if updates.get("itemCode") is not None:
        updates["itemCode"] = str(updates["itemCode"])

    await _require(store, product_id)
    await store.set(_collection(), product_id, updates, merge=True)
    logger.info("Updated product %s: %s", product_id, ", ".join(updates))
    return _make_product_dict(product_id, await _require(store, product_id))

@reported
async def delete_product_logic(store: DocumentStore, product_id: str) -> Dict[str, Any]:
    await _require(store, product_id)
    await store.delete(_collection(), product_id)
    logger.info("Deleted product %s", product_id)
    return {"success": True}


# Bill endpoint
@reported
async def download_bill_logic(store: DocumentStore, payload: BillRequest) -> Tuple[Dict[str, str], bytes]:
    if not payload.items:
        raise HTTPException(status_code=400, detail="Items required")

    settings = load_settings()
    meta = payload.meta or BillMeta()
    bill = await compile_bill(store, settings.products_collection, payload.items)
    logger.info(
        "Bill %s: %d lines, %d dropped, grand total %s",
        meta.invoiceNo or "-", len(bill.lines), len(bill.dropped), bill.grand_total,
    )

    wb = render_bill(bill, meta, settings.shop_name, settings.currency_symbol)
    content = await run_in_threadpool(workbook_bytes, wb)
    headers = {"Content-Disposition": content_disposition(bill_filename(meta.invoiceNo))}
    return headers, content
