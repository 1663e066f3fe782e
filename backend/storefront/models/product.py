from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String, Text
from storefront.db import Base

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_floor"),)

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)
    # the core changes this only through InventoryLedger.check_and_reserve
    stock = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} stock={self.stock}>"
