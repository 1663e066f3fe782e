from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import InsufficientStock, InvalidArgument, NotFound
from storefront.repositories.product_repo import ProductRepository
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StockReservation:
    """Stock taken for one line, with the product as it was read under lock."""

    product_id: int
    sku: str
    name: Optional[str]
    quantity: int
    price: Decimal


class InventoryLedger:
    """
    The only writer of Product.stock.

    Callers never see a separate "read stock" / "write stock" pair: the check
    and the decrement happen together, under a row lock, inside the caller's
    transaction. Nothing here commits; a failure leaves the enclosing
    transaction to roll back.
    """

    def __init__(self, db: Session, lock_timeout_ms: Optional[int] = None):
        self.db = db
        self.products = ProductRepository(db)
        self.lock_timeout_ms = (
            settings.CHECKOUT_LOCK_TIMEOUT_MS if lock_timeout_ms is None else lock_timeout_ms
        )

    def apply_lock_timeout(self):
        """Bound row-lock waits for the current transaction (PostgreSQL only)."""
        if self.db.get_bind().dialect.name != "postgresql" or not self.lock_timeout_ms:
            return
        self.db.execute(text(f"SET LOCAL lock_timeout = {int(self.lock_timeout_ms)}"))

    def check_and_reserve(self, product_id: int, quantity: int) -> StockReservation:
        if quantity <= 0:
            raise InvalidArgument("Quantity must be positive")

        product = self.products.get_for_update(product_id)
        if product is None:
            raise NotFound(f"product {product_id} not found")

        # a deactivated product cannot be sold, whatever its stock says
        available = product.stock if product.active else 0
        if available < quantity:
            logger.info(
                "Stock check failed product=%s requested=%s available=%s",
                product_id,
                quantity,
                available,
            )
            raise InsufficientStock(product_id, quantity, available)

        price = product.price
        if self.products.decrement_stock(product_id, quantity) != 1:
            # the guarded UPDATE refused: stock moved between read and write
            self.db.refresh(product)
            raise InsufficientStock(product_id, quantity, product.stock)

        logger.debug(
            "Reserved product=%s qty=%s stock_left=%s", product_id, quantity, product.stock
        )
        return StockReservation(
            product_id=product.id,
            sku=product.sku,
            name=product.name,
            quantity=quantity,
            price=price,
        )
