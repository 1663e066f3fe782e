import importlib.util
import os
from decimal import Decimal

from sqlalchemy import select

from storefront.db import SessionLocal
from storefront.models.product import Product

_SCRIPT = os.path.join(os.path.dirname(__file__), "..", "scripts", "seed_products.py")


def _load_seed_module():
    spec = importlib.util.spec_from_file_location("seed_products", _SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_seed_normalizes_and_upserts():
    seed = _load_seed_module()
    assert seed.seed([
        {"sku": "A-1", "name": "Apple", "price": "1.5", "stock": 4},
        {"id": "B-1", "title": "Bread", "price_cents": 250, "quantity": 2, "is_active": False},
        {"name": "no sku, skipped"},
    ]) == 2
    seed.seed([{"sku": "A-1", "name": "Apple", "price": "1.75", "stock": 9}])

    with SessionLocal() as s:
        rows = {p.sku: p for p in s.execute(select(Product)).scalars()}
        assert set(rows) == {"A-1", "B-1"}
        assert rows["A-1"].price == Decimal("1.75")
        assert rows["A-1"].stock == 9
        assert rows["B-1"].price == Decimal("2.50")
        assert rows["B-1"].active is False
