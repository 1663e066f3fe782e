from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models.cart import Cart
from storefront.models.cart_item import CartItem


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int, for_update: bool = False) -> Optional[Cart]:
        stmt = select(Cart).where(Cart.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_or_create(self, user_id: int) -> Cart:
        c = self.get_by_user(user_id)
        if c:
            return c
        # a concurrent request may create the same user's cart; the unique
        # index on user_id decides, the loser re-reads the winner's row
        try:
            with self.db.begin_nested():
                c = Cart(user_id=user_id)
                self.db.add(c)
                self.db.flush()
        except IntegrityError:
            c = self.get_by_user(user_id)
            if c is None:
                raise
        return c

    def items_for(self, cart_id: int) -> List[CartItem]:
        return list(
            self.db.execute(
                select(CartItem)
                .where(CartItem.cart_id == cart_id)
                .order_by(CartItem.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def get_item(self, item_id: int) -> Optional[CartItem]:
        return self.db.get(CartItem, item_id)

    def find_item(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        return self.db.execute(
            select(CartItem).where(
                CartItem.cart_id == cart_id, CartItem.product_id == product_id
            )
        ).scalar_one_or_none()

    def add_item(self, cart: Cart, product_id: int, quantity: int) -> CartItem:
        item = CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity)
        self.db.add(item)
        self.db.flush()
        return item

    def delete_owned_item(self, user_id: int, item_id: int) -> int:
        """Delete the item only if it sits in `user_id`'s cart. Returns rows deleted."""
        owned_carts = select(Cart.id).where(Cart.user_id == user_id)
        result = self.db.execute(
            delete(CartItem)
            .where(CartItem.id == item_id, CartItem.cart_id.in_(owned_carts))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def bump_version(self, cart: Cart) -> int:
        """
        Optimistic claim on the cart row:
        UPDATE carts SET version = v + 1 WHERE id = :id AND version = v.
        Returns rowcount; 0 means someone else changed the cart first.
        """
        result = self.db.execute(
            update(Cart)
            .where(Cart.id == cart.id, Cart.version == cart.version)
            .values(version=cart.version + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.expire(cart, ["version"])
        return result.rowcount

    def clear(self, cart_id: int) -> int:
        """Hard-delete every item of the cart. Returns rows deleted."""
        result = self.db.execute(
            delete(CartItem)
            .where(CartItem.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
