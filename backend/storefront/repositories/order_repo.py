from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from storefront.models.order import Order, OrderItem, OrderStatus


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _gen_order_number(self) -> str:
        return f"ORD-{uuid4().hex[:10].upper()}"

    def create(self, user_id: int, assembled) -> Order:
        """Persist one order with all of its lines. `assembled` is an AssembledOrder."""
        order = Order(
            order_number=self._gen_order_number(),
            user_id=user_id,
            status=OrderStatus.PLACED,
            total_amount=assembled.total_amount,
        )
        for line in assembled.lines:
            order.items.append(
                OrderItem(
                    product_id=line.product_id,
                    sku=line.sku,
                    name=line.name,
                    quantity=line.quantity,
                    price=line.price,
                )
            )
        self.db.add(order)
        self.db.flush()
        return order

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.execute(
            select(Order).where(Order.id == order_id).options(selectinload(Order.items))
        ).scalar_one_or_none()

    def count_for_user(self, user_id: int) -> int:
        return (
            self.db.execute(
                select(func.count()).select_from(Order).where(Order.user_id == user_id)
            ).scalar()
            or 0
        )

    def list_for_user(self, user_id: int, offset: int, limit: int) -> List[Order]:
        return list(
            self.db.execute(
                select(Order)
                .where(Order.user_id == user_id)
                .options(selectinload(Order.items))
                .order_by(Order.created_at.desc(), Order.id.desc())
                .offset(offset)
                .limit(limit)
            ).scalars()
        )
