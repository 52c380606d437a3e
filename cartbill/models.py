# cartbill/models.py
from pydantic import BaseModel
from typing import Any, List, Union

Number = Union[int, float]

class Product(BaseModel):
    id: str
    itemCode: str
    description: Any = ""
    unit: Any = ""
    price: Number = 0

class BillLine(BaseModel):
    itemCode: str
    description: Any = ""
    unit: Any = ""
    price: Number = 0
    quantity: Number = 0
    total: Number = 0

class Bill(BaseModel):
    lines: List[BillLine] = []
    grand_total: Number = 0
    dropped: List[str] = []
