from typing import List, Tuple

from sqlalchemy.orm import Session

from storefront.models.order import Order
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.order_schema import OrderView, PageMeta
from storefront.utils.ownership import require_owned
from storefront.utils.pagination import clamp_page, total_pages
from storefront.utils.transactions import smart_transaction


def order_to_view(order: Order) -> OrderView:
    # renders only what was frozen on the order rows, never the live Product
    return OrderView.model_validate(order)


class OrderService:
    """Read side of orders, always scoped to the requesting user."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository(db)

    def list_orders(self, user_id: int, page: int, page_size: int) -> Tuple[List[OrderView], PageMeta]:
        req = clamp_page(page, page_size)
        with smart_transaction(self.db):
            total = self.repo.count_for_user(user_id)
            orders = self.repo.list_for_user(user_id, req.offset, req.limit)
            views = [order_to_view(o) for o in orders]
        meta = PageMeta(
            page=req.page,
            limit=req.limit,
            total=total,
            total_pages=total_pages(total, req.limit),
        )
        return views, meta

    def get_order(self, user_id: int, order_id: int) -> OrderView:
        with smart_transaction(self.db):
            order = require_owned(
                self.repo.get(order_id), user_id, lambda o: o.user_id, "order"
            )
            return order_to_view(order)
