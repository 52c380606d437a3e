import math
from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any, List, Union

# Request bodies are loosely typed on purpose: values are coerced in the logic layer.

class ProductIn(BaseModel):
    itemCode: Any = None
    description: Any = ""
    unit: Any = ""
    price: Any = 0

class ProductUpdate(BaseModel):
    itemCode: Any = None
    description: Any = None
    unit: Any = None
    price: Any = None

class BillLineIn(BaseModel):
    itemCode: Any = None
    qty: Any = 0

class BillMeta(BaseModel):
    shopName: Optional[str] = None
    invoiceNo: Optional[str] = None
    customer: Optional[str] = None
    date: Optional[str] = None

    @field_validator("shopName", "invoiceNo", "customer", "date", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Optional[str]:
        # free-form: numbers and other scalars are printed as-is
        return None if value is None else str(value)

class BillRequest(BaseModel):
    items: Optional[List[BillLineIn]] = None
    meta: Optional[BillMeta] = None

UPDATABLE_FIELDS = ("itemCode", "description", "unit", "price")

def parse_number(value: Any) -> Union[int, float]:
    """
    Coerce a JSON scalar to a number. None and blank strings are 0, booleans
    are 0/1, integral floats come back as int. Raises ValueError otherwise.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        number = float(text)
    else:
        raise ValueError(f"not a number: {value!r}")
    if isinstance(number, float):
        if not math.isfinite(number):
            raise ValueError(f"not a number: {value!r}")
        if number.is_integer():
            return int(number)
    return number

def to_quantity(value: Any) -> Union[int, float]:
    try:
        return parse_number(value)
    except ValueError:
        return 0

def to_price(value: Any) -> Union[int, float]:
    price = parse_number(value)
    if price < 0:
        raise ValueError(f"negative price: {value!r}")
    return price

def _make_product_dict(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": doc_id, **data}
