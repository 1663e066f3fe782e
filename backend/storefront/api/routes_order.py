from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id
from storefront.config import settings
from storefront.db import get_db
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService
from storefront.utils.responses import success

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.post("", summary="Checkout: turn the cart into an order")
def create_order(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    order = CheckoutService(db).checkout(user_id)
    return success("Order created successfully", order, status_code=201)


@router.get("", summary="List my orders")
def list_orders(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    # out-of-range values are clamped by the service, not rejected
    orders, meta = OrderService(db).list_orders(user_id, page, limit)
    return success("Orders retrieved successfully", orders, meta=meta)


@router.get("/{order_id}", summary="Get one of my orders")
def get_order(
    order_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    order = OrderService(db).get_order(user_id, order_id)
    return success("Order retrieved successfully", order)
