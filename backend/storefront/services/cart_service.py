from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.errors import InsufficientStock, InvalidArgument, NotFound
from storefront.models.cart import Cart
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart_schema import CartItemView, CartView
from storefront.schemas.product_schema import ProductOut
from storefront.utils.logging import get_logger
from storefront.utils.ownership import require_owned
from storefront.utils.transactions import smart_transaction

logger = get_logger(__name__)


class CartService:
    """
    A user's pending selection. Quantities are validated against stock when
    they are written, but carts never hold inventory: stock is only taken at
    checkout, where it is validated again.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    def _check_quantity(self, quantity: int):
        if quantity is None or quantity < 1:
            raise InvalidArgument("Quantity must be at least 1")

    def _load_sellable(self, product_id: int):
        product = self.product_repo.get_active(product_id)
        if not product:
            raise NotFound(f"product {product_id} not found")
        return product

    def _touch(self, cart: Cart):
        cart.version = (cart.version or 0) + 1

    def ensure_cart(self, user_id: int) -> Cart:
        """Get or create the user's single cart (registration hook)."""
        with smart_transaction(self.db):
            return self.cart_repo.get_or_create(user_id)

    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartView:
        self._check_quantity(quantity)
        with smart_transaction(self.db):
            product = self._load_sellable(product_id)
            if quantity > product.stock:
                raise InsufficientStock(product.id, quantity, product.stock)

            cart = self.cart_repo.get_or_create(user_id)
            item = self.cart_repo.find_item(cart.id, product.id)
            if item:
                merged = item.quantity + quantity
                if merged > product.stock:
                    raise InsufficientStock(product.id, merged, product.stock)
                item.quantity = merged
            else:
                item = self.cart_repo.add_item(cart, product.id, quantity)
            self._touch(cart)
            self.db.flush()
            logger.info(
                "Cart %s: product %s now at qty %s (user %s)",
                cart.id,
                product.id,
                item.quantity,
                user_id,
            )
        return self.view(user_id)

    def update_item(self, user_id: int, item_id: int, quantity: int) -> CartView:
        self._check_quantity(quantity)
        with smart_transaction(self.db):
            item = require_owned(
                self.cart_repo.get_item(item_id),
                user_id,
                lambda it: it.cart.user_id,
                "cart item",
            )
            product = self._load_sellable(item.product_id)
            if quantity > product.stock:
                raise InsufficientStock(product.id, quantity, product.stock)
            item.quantity = quantity
            self._touch(item.cart)
            self.db.flush()
            logger.info("Cart item %s set to qty %s (user %s)", item_id, quantity, user_id)
        return self.view(user_id)

    def remove_item(self, user_id: int, item_id: int) -> None:
        """
        Delete where owned. Removing an item that does not exist, or that sits
        in another user's cart, succeeds without doing anything.
        """
        with smart_transaction(self.db):
            removed = self.cart_repo.delete_owned_item(user_id, item_id)
            if removed:
                cart = self.cart_repo.get_by_user(user_id)
                self._touch(cart)
                self.db.flush()
        logger.info("Cart item %s removed=%s (user %s)", item_id, bool(removed), user_id)

    def view(self, user_id: int) -> CartView:
        with smart_transaction(self.db):
            return self._build_view(user_id)

    def _build_view(self, user_id: int) -> CartView:
        cart = self.cart_repo.get_by_user(user_id)
        if cart is None:
            return CartView(user_id=user_id)

        items = []
        total = Decimal("0.00")
        for it in self.cart_repo.items_for(cart.id):
            subtotal = it.product.price * it.quantity
            total += subtotal
            items.append(
                CartItemView(
                    id=it.id,
                    product=ProductOut.model_validate(it.product),
                    quantity=it.quantity,
                    subtotal=subtotal,
                )
            )
        return CartView(id=cart.id, user_id=cart.user_id, items=items, total=total)
