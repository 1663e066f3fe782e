from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.models.product import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_active(self, product_id: int) -> Optional[Product]:
        return self.db.execute(
            select(Product).where(Product.id == product_id, Product.active.is_(True))
        ).scalar_one_or_none()

    def get_for_update(self, product_id: int) -> Optional[Product]:
        """
        Read the product row under an exclusive row lock (FOR UPDATE).
        populate_existing makes sure a copy already in the identity map is
        overwritten with what the locked read returned.
        """
        return self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        """
        Guarded decrement: only applies when enough stock is left.
        Returns the number of rows updated (0 or 1).
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        product = self.db.get(Product, product_id)
        if product is not None:
            self.db.expire(product, ["stock"])
        return result.rowcount

    def create_or_update(
        self,
        sku: str,
        name: str,
        price,
        stock: int = 0,
        description: str = None,
        active: bool = True,
    ) -> Product:
        p = self.db.execute(select(Product).where(Product.sku == sku)).scalar_one_or_none()
        if p:
            p.name = name
            p.price = price
            p.stock = stock
            p.description = description
            p.active = active
        else:
            p = Product(
                sku=sku,
                name=name,
                price=price,
                stock=stock,
                description=description,
                active=active,
            )
            self.db.add(p)
        self.db.flush()
        return p
