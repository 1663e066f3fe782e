import os
import tempfile
from decimal import Decimal

import pytest

# point the app at a throwaway SQLite file before storefront.config is imported
_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from storefront.db import SessionLocal, init_db  # noqa: E402
from storefront.models.product import Product  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def make_product():
    counter = {"n": 0}

    def _make(price="10.00", stock=5, active=True, name=None):
        counter["n"] += 1
        n = counter["n"]
        with SessionLocal() as s:
            p = Product(
                sku=f"SKU-{n:03d}",
                name=name or f"Product {n}",
                price=Decimal(price),
                stock=stock,
                active=active,
            )
            s.add(p)
            s.commit()
            return p.id

    return _make


def _stock_of(product_id: int) -> int:
    with SessionLocal() as s:
        return s.get(Product, product_id).stock


def _set_product(product_id: int, **fields):
    with SessionLocal() as s:
        p = s.get(Product, product_id)
        for k, v in fields.items():
            setattr(p, k, v)
        s.commit()


@pytest.fixture
def stock_of():
    return _stock_of


@pytest.fixture
def set_product():
    """Catalog-side edit (price, active flag, stock) made outside the core."""
    return _set_product
