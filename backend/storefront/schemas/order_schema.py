from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.models.order import OrderStatus


class OrderItemView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    sku: str
    name: Optional[str] = None
    quantity: int
    price: Decimal


class OrderView(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    items: List[OrderItemView]


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
