from decimal import Decimal

import pytest

from storefront.db import SessionLocal
from storefront.errors import InsufficientStock, InvalidArgument, NotFound
from storefront.services.cart_service import CartService


def test_add_item_creates_cart_and_prices_live(db, make_product):
    pid = make_product(price="10.00", stock=5)
    cart = CartService(db).add_item(1, pid, 3)
    assert cart.id is not None
    assert cart.user_id == 1
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.items[0].subtotal == Decimal("30.00")
    assert cart.total == Decimal("30.00")


def test_add_same_product_merges_quantities(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    svc.add_item(1, pid, 2)
    cart = svc.add_item(1, pid, 3)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5


def test_merge_beyond_stock_is_rejected_and_keeps_quantity(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    svc.add_item(1, pid, 4)
    with pytest.raises(InsufficientStock) as exc:
        svc.add_item(1, pid, 2)
    assert exc.value.requested == 6
    assert svc.view(1).items[0].quantity == 4


def test_add_more_than_stock(db, make_product):
    pid = make_product(stock=2)
    with pytest.raises(InsufficientStock):
        CartService(db).add_item(1, pid, 3)
    assert CartService(db).view(1).items == []


@pytest.mark.parametrize("qty", [0, -1])
def test_add_invalid_quantity(db, make_product, qty):
    pid = make_product()
    with pytest.raises(InvalidArgument):
        CartService(db).add_item(1, pid, qty)


def test_add_unknown_or_inactive_product(db, make_product):
    inactive = make_product(active=False)
    svc = CartService(db)
    with pytest.raises(NotFound):
        svc.add_item(1, 4242, 1)
    with pytest.raises(NotFound):
        svc.add_item(1, inactive, 1)


def test_adding_does_not_touch_stock(db, make_product, stock_of):
    pid = make_product(stock=5)
    CartService(db).add_item(1, pid, 5)
    assert stock_of(pid) == 5


def test_update_item_sets_quantity(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    item_id = svc.add_item(1, pid, 1).items[0].id
    cart = svc.update_item(1, item_id, 4)
    assert cart.items[0].quantity == 4


def test_update_beyond_stock_keeps_prior_quantity(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    item_id = svc.add_item(1, pid, 2).items[0].id
    with pytest.raises(InsufficientStock):
        svc.update_item(1, item_id, 6)
    assert svc.view(1).items[0].quantity == 2


def test_update_invalid_quantity(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    item_id = svc.add_item(1, pid, 2).items[0].id
    with pytest.raises(InvalidArgument):
        svc.update_item(1, item_id, 0)


def test_update_foreign_item_looks_missing(db, make_product):
    pid = make_product(stock=5)
    svc = CartService(db)
    item_id = svc.add_item(1, pid, 2).items[0].id
    with pytest.raises(NotFound) as foreign:
        svc.update_item(2, item_id, 1)
    with pytest.raises(NotFound) as missing:
        svc.update_item(2, 9999, 1)
    assert str(foreign.value) == str(missing.value)
    assert svc.view(1).items[0].quantity == 2


def test_remove_item(db, make_product):
    a = make_product()
    b = make_product()
    svc = CartService(db)
    svc.add_item(1, a, 1)
    item_id = svc.add_item(1, b, 1).items[1].id
    svc.remove_item(1, item_id)
    assert [it.product.id for it in svc.view(1).items] == [a]


def test_remove_is_idempotent_and_scoped_to_owner(db, make_product):
    pid = make_product()
    svc = CartService(db)
    item_id = svc.add_item(1, pid, 1).items[0].id
    # someone else's item and an unknown id are both quiet no-ops
    svc.remove_item(2, item_id)
    svc.remove_item(1, 9999)
    assert len(svc.view(1).items) == 1
    svc.remove_item(1, item_id)
    svc.remove_item(1, item_id)
    assert svc.view(1).items == []


def test_view_without_cart_is_empty(db):
    cart = CartService(db).view(77)
    assert cart.id is None
    assert cart.items == []
    assert cart.total == Decimal("0.00")


def test_view_uses_current_price(db, make_product, set_product):
    pid = make_product(price="10.00", stock=5)
    CartService(db).add_item(1, pid, 2)
    set_product(pid, price=Decimal("12.00"))
    with SessionLocal() as s:
        assert CartService(s).view(1).total == Decimal("24.00")


def test_ensure_cart_is_one_per_user(db):
    svc = CartService(db)
    first = svc.ensure_cart(5).id
    second = svc.ensure_cart(5).id
    assert first == second
