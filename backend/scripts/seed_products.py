#!/usr/bin/env python3
"""
Seed catalog products from a JSON file for local development.

The catalog is managed elsewhere in production; this only fills a dev database
so carts and checkout have something to work with.

Usage:
    python scripts/seed_products.py --file products.json
    python scripts/seed_products.py --demo
"""
import argparse
import json
import os
import sys
from decimal import Decimal, InvalidOperation

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import SessionLocal, init_db
from storefront.repositories.product_repo import ProductRepository
from storefront.utils.logging import get_logger

logger = get_logger("seed")

DEMO_PRODUCTS = [
    {"sku": "TEA-100", "name": "Tea 100g", "price": "3.00", "stock": 5},
    {"sku": "COF-200", "name": "Coffee 200g", "price": "6.00", "stock": 1},
    {"sku": "MUG-01", "name": "Mug", "price": "10.00", "stock": 5},
    {"sku": "KET-01", "name": "Kettle", "price": "39.99", "stock": 2},
]


def _normalize_entry(entry):
    """Return a normalized dict with keys: sku, name, price, stock, description, active"""
    sku = entry.get("sku") or entry.get("id") or entry.get("productId")
    name = entry.get("name") or entry.get("title") or ""
    # accept price as decimal string/number, or price_cents
    if entry.get("price_cents") is not None:
        price = Decimal(int(entry["price_cents"])) / 100
    else:
        try:
            price = Decimal(str(entry.get("price", entry.get("amount", 0))))
        except InvalidOperation:
            price = Decimal("0")
    stock = int(entry.get("stock", entry.get("quantity", 0)) or 0)
    return {
        "sku": str(sku) if sku is not None else None,
        "name": name,
        "price": price.quantize(Decimal("0.01")),
        "stock": max(0, stock),
        "description": entry.get("description") or "",
        "active": bool(entry.get("active", entry.get("is_active", True))),
    }


def _load_entries(path: str):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        if "items" in data and isinstance(data["items"], list):
            return data["items"]
        return list(data.values())
    if isinstance(data, list):
        return data
    return []


def seed(entries):
    init_db()
    db = SessionLocal()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in map(_normalize_entry, entries):
            if not entry["sku"]:
                continue
            repo.create_or_update(**entry)
            created += 1
        db.commit()
        logger.info("Seeded products: %s", created)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", help="Path to a product json (list, or object with 'items')")
    parser.add_argument("--demo", action="store_true", help="Seed a few built-in demo products")
    args = parser.parse_args()
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            sys.exit(1)
        seed(_load_entries(args.file))
    elif args.demo:
        seed(DEMO_PRODUCTS)
    else:
        parser.print_help()
        sys.exit(1)
