import enum
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.config import settings
from storefront.errors import CartConflict, EmptyCart, StoreError, TransactionFailed
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.order_schema import OrderView
from storefront.services.inventory_service import InventoryLedger
from storefront.services.order_assembler import OrderAssembler
from storefront.services.order_service import order_to_view
from storefront.utils.logging import get_logger
from storefront.utils.transactions import owned_transaction

logger = get_logger(__name__)

# nothing has committed when these are raised, so the attempt can be replayed
TRANSIENT_ERRORS = (OperationalError, CartConflict)


class CheckoutState(str, enum.Enum):
    STARTED = "started"
    STOCK_VALIDATING = "stock_validating"
    STOCK_RESERVED = "stock_reserved"
    ORDER_PERSISTED = "order_persisted"
    CART_CLEARED = "cart_cleared"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class CheckoutTransaction:
    """
    One checkout attempt: cart -> reserved stock -> one order -> empty cart,
    all inside a single database transaction.

    Any exception before COMMITTED rolls the whole transaction back, so stock
    decrements made for earlier lines are never observable afterwards.
    """

    def __init__(self, db: Session, user_id: int, ledger: Optional[InventoryLedger] = None,
                 assembler: Optional[OrderAssembler] = None):
        self.db = db
        self.user_id = user_id
        self.carts = CartRepository(db)
        self.orders = OrderRepository(db)
        self.ledger = ledger or InventoryLedger(db)
        self.assembler = assembler or OrderAssembler()
        self.state = CheckoutState.STARTED

    def _advance(self, state: CheckoutState):
        logger.debug("checkout user=%s %s -> %s", self.user_id, self.state.value, state.value)
        self.state = state

    def run(self) -> OrderView:
        try:
            with owned_transaction(self.db):
                self.ledger.apply_lock_timeout()
                self._advance(CheckoutState.STOCK_VALIDATING)

                cart = self.carts.get_by_user(self.user_id, for_update=True)
                items = self.carts.items_for(cart.id) if cart else []
                if not items:
                    raise EmptyCart()

                # claim the cart so a concurrent checkout of the same cart
                # cannot also turn these lines into an order
                if self.carts.bump_version(cart) != 1:
                    raise CartConflict(f"cart {cart.id} changed during checkout")

                reservations = [
                    self.ledger.check_and_reserve(it.product_id, it.quantity)
                    for it in items
                ]
                self._advance(CheckoutState.STOCK_RESERVED)

                assembled = self.assembler.assemble(reservations)
                order = self.orders.create(self.user_id, assembled)
                self._advance(CheckoutState.ORDER_PERSISTED)

                if self.carts.clear(cart.id) != len(items):
                    raise CartConflict(f"cart {cart.id} changed during checkout")
                self._advance(CheckoutState.CART_CLEARED)

                view = order_to_view(order)
        except Exception as e:
            logger.info(
                "checkout user=%s rolled back at %s: %s",
                self.user_id,
                self.state.value,
                getattr(e, "kind", type(e).__name__),
            )
            self._advance(CheckoutState.ROLLED_BACK)
            raise

        self._advance(CheckoutState.COMMITTED)
        logger.info(
            "checkout user=%s committed order %s total=%s",
            self.user_id,
            view.order_number,
            view.total_amount,
        )
        return view


class CheckoutService:
    """
    Runs CheckoutTransaction, replaying it on transient storage failures.

    EmptyCart, InsufficientStock and NotFound come out unchanged; any other
    failure is reported as TransactionFailed with the original chained.
    """

    def __init__(self, db: Session, max_attempts: Optional[int] = None):
        self.db = db
        self.max_attempts = max_attempts or settings.CHECKOUT_MAX_ATTEMPTS

    def _log_retry(self, retry_state):
        logger.warning(
            "checkout attempt %s failed transiently: %s",
            retry_state.attempt_number,
            retry_state.outcome.exception(),
        )

    def checkout(self, user_id: int) -> OrderView:
        retrying = Retrying(
            reraise=False,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=self._log_retry,
        )
        try:
            return retrying(self._attempt, user_id)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.warning("checkout user=%s gave up after %s attempts", user_id, self.max_attempts)
            raise TransactionFailed(
                "checkout could not complete, please retry",
                {"attempts": self.max_attempts},
            ) from cause
        except StoreError:
            raise
        except Exception as e:
            logger.exception("checkout user=%s failed", user_id)
            raise TransactionFailed("checkout failed") from e

    def _attempt(self, user_id: int) -> OrderView:
        return CheckoutTransaction(self.db, user_id).run()
