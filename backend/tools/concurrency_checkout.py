"""
Fire concurrent checkouts at a running server and report what happened.

Every simulated user first puts `--qty` of the product in their cart, then all
of them check out at once. With stock S, at most S // qty checkouts may win;
the rest must fail with InsufficientStock (or TransactionFailed under heavy
lock contention). Stock must never go negative.

    python tools/concurrency_checkout.py --product 1 --qty 1 --workers 8
"""
import argparse
import concurrent.futures
import os
from collections import Counter

import requests

BASE = os.environ.get("STOREFRONT_BASE", "http://127.0.0.1:8000")


def _headers(user_id):
    return {"Content-Type": "application/json", "X-User-Id": str(user_id)}


def fill_cart(user_id, product_id, qty):
    r = requests.post(
        f"{BASE}/api/v1/cart/items",
        json={"product_id": product_id, "quantity": qty},
        headers=_headers(user_id),
        timeout=10,
    )
    return r.status_code, r.json().get("error")


def checkout_task(user_id):
    try:
        r = requests.post(f"{BASE}/api/v1/orders", headers=_headers(user_id), timeout=30)
        body = r.json()
        return (user_id, r.status_code, body.get("error") or "ok")
    except requests.RequestException as e:
        return (user_id, "ERR", str(e))


def run(workers, product_id, qty, first_user):
    users = list(range(first_user, first_user + workers))
    for u in users:
        status, err = fill_cart(u, product_id, qty)
        if status != 200:
            print(f"user {u}: could not fill cart ({status} {err})")

    print(f"Checking out {workers} carts concurrently (product={product_id}, qty={qty})")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        results = list(ex.map(checkout_task, users))

    for r in results:
        print(r)
    print("Outcomes:", dict(Counter(r[2] for r in results)))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent checkout stress tool.")
    parser.add_argument("--product", type=int, required=True)
    parser.add_argument("--qty", type=int, default=1)
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--first-user", type=int, default=1000)
    args = parser.parse_args()
    run(args.workers, args.product, args.qty, args.first_user)
