from datetime import datetime, timezone

from storefront.db import Base
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import relationship


def _utcnow():
    return datetime.now(timezone.utc)


class Cart(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    # one live cart per user
    user_id = Column(Integer, unique=True, index=True, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )
