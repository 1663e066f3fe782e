from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id
from storefront.db import get_db
from storefront.schemas.cart_schema import AddToCartIn, UpdateCartItemIn
from storefront.services.cart_service import CartService
from storefront.utils.responses import success

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.get("", summary="Get cart")
def get_cart(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    cart = CartService(db).view(user_id)
    return success("Cart retrieved successfully", cart)


@router.post("/items", summary="Add item to cart")
def add_item(
    payload: AddToCartIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    cart = CartService(db).add_item(user_id, payload.product_id, payload.quantity)
    return success("Item added to cart", cart)


@router.put("/items/{item_id}", summary="Update cart item quantity")
def update_item(
    item_id: int,
    payload: UpdateCartItemIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    cart = CartService(db).update_item(user_id, item_id, payload.quantity)
    return success("Cart item updated", cart)


@router.delete("/items/{item_id}", summary="Remove item")
def remove_item(
    item_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    CartService(db).remove_item(user_id, item_id)
    return success("Item removed from cart")
