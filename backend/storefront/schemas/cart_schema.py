from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.product_schema import ProductOut


class AddToCartIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class UpdateCartItemIn(BaseModel):
    quantity: int = Field(..., ge=1)


class CartItemView(BaseModel):
    id: int
    product: ProductOut
    quantity: int
    # quantity * current product price; nothing is frozen before checkout
    subtotal: Decimal


class CartView(BaseModel):
    id: Optional[int] = None
    user_id: int
    items: List[CartItemView] = []
    total: Decimal = Decimal("0.00")
