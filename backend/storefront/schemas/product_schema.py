from decimal import Decimal
from typing import Optional
from pydantic import BaseModel
from pydantic import ConfigDict

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int
    active: bool
