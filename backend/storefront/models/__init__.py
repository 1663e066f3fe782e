from storefront.models.product import Product
from storefront.models.cart import Cart
from storefront.models.cart_item import CartItem
from storefront.models.order import Order, OrderItem, OrderStatus

__all__ = ["Product", "Cart", "CartItem", "Order", "OrderItem", "OrderStatus"]
