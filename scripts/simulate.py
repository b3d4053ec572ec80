"""
Order Flow Simulation Script

Walks one customer through a full order against a running server:
browse, fill the cart, apply a promo, check out, follow the driver until
delivery, rate the order and reorder it.

Run from project root:
    uvicorn munchly.main:app --port 8001
    python scripts/simulate.py            # step statuses through /advance
    python scripts/simulate.py --watch    # let the tracking timers run
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"

ADDRESSES = [
    {"street": "1 Market St", "city": "San Francisco", "state": "CA", "zip_code": "94105",
     "latitude": 37.7936, "longitude": -122.3950},
    {"street": "500 Castro St", "city": "San Francisco", "state": "CA", "zip_code": "94114",
     "latitude": 37.7609, "longitude": -122.4350},
    {"street": "2 Stockton St", "city": "San Francisco", "state": "CA", "zip_code": "94108",
     "latitude": 37.7858, "longitude": -122.4064},
]
TIPS = [0.0, 2.0, 3.5, 5.0]


class FlowError(Exception):
    pass


async def call(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    expect: int = 200,
    **kwargs: Any,
) -> Any:
    """Send a request and return its JSON body, failing on an unexpected status."""
    response = await client.request(method, f"{API_BASE_URL}{path}", timeout=30.0, **kwargs)
    if response.status_code != expect:
        raise FlowError(f"{method} {path} -> {response.status_code}: {response.text[:200]}")
    return response.json()


def print_cart(cart: Dict[str, Any]) -> None:
    for line in cart["lines"]:
        print(f"   {line['quantity']} x {line['name']:<28} ${line['total_price']:.2f}")
    print(f"   Subtotal ${cart['subtotal']:.2f} | Delivery ${cart['delivery_fee']:.2f} | "
          f"Service ${cart['service_fee']:.2f} | Tax ${cart['tax']:.2f} | "
          f"Discount -${cart['discount']:.2f}")
    print(f"   💰 Total ${cart['total']:.2f} ({cart['item_count']} items)")


def print_tracking(snapshot: Dict[str, Any]) -> None:
    driver = snapshot.get("driver_position") or {}
    print(
        f"   📍 {snapshot['status_title']:<22} progress {snapshot['driver_progress']:.2f} "
        f"driver ({driver.get('latitude', 0):.5f}, {driver.get('longitude', 0):.5f})"
    )


async def build_cart(client: httpx.AsyncClient) -> Dict[str, Any]:
    print("\n1️⃣ Browsing restaurants...")
    restaurants = await call(client, "GET", "/api/restaurants", params={"q": "pizza"})
    if not restaurants:
        raise FlowError("No pizza places found")
    restaurant = restaurants[0]
    print(f"   ✅ Found {restaurant['name']} ({restaurant['rating']}⭐)")

    menu = await call(client, "GET", f"/api/restaurants/{restaurant['id']}/menu")
    print(f"   ✅ Menu has {len(menu)} items")

    print("\n2️⃣ Filling the cart...")
    cart = await call(client, "DELETE", "/api/cart")
    for item in random.sample(menu, k=min(3, len(menu))):
        payload: Dict[str, Any] = {"menu_item_id": item["id"], "quantity": random.randint(1, 2)}
        groups = item.get("customization_groups") or []
        if groups and groups[0]["options"]:
            payload["option_ids"] = [random.choice(groups[0]["options"])["id"]]
        cart = await call(client, "POST", "/api/cart/items", json=payload)
        print(f"   ✅ Added {payload['quantity']} x {item['name']}")

    print("\n3️⃣ Applying promo WELCOME50...")
    response = await client.post(f"{API_BASE_URL}/api/cart/promo", json={"code": "WELCOME50"})
    if response.status_code == 200:
        cart = response.json()
        print("   ✅ Promo applied")
    else:
        print(f"   ⚠️ {response.json().get('error')}")
    print_cart(cart)
    return cart


async def follow_order(client: httpx.AsyncClient, order_id: str, watch: bool, interval: float) -> None:
    print("\n5️⃣ Tracking the driver...")
    snapshot = await call(client, "GET", f"/api/orders/{order_id}/tracking")
    print_tracking(snapshot)

    while snapshot["status"] not in ("delivered", "cancelled", "refunded"):
        if watch:
            await asyncio.sleep(interval)
        else:
            await call(client, "POST", f"/api/orders/{order_id}/advance")
        snapshot = await call(client, "GET", f"/api/orders/{order_id}/tracking")
        print_tracking(snapshot)


async def run_flow(watch: bool = False, interval: float = 2.0, rating: Optional[int] = 5) -> bool:
    """Run one complete order. Returns False when any step fails."""
    print("=" * 70)
    print("🍔 MUNCHLY EATS ORDER FLOW")
    print("=" * 70)
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"🔧 Mode: {'timers' if watch else 'manual advance'}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        try:
            health = await call(client, "GET", "/health")
            print(f"\n🩺 Health: {health['status']}")

            await build_cart(client)

            print("\n4️⃣ Checking out...")
            address = random.choice(ADDRESSES)
            order = await call(
                client,
                "POST",
                "/api/orders",
                expect=201,
                json={
                    "delivery_address": address,
                    "payment_method_id": "pm_card_visa",
                    "tip_amount": random.choice(TIPS),
                    "delivery_instructions": random.choice([None, "Leave at door", "Ring doorbell"]),
                },
            )
            print(f"   ✅ Order {order['order_number']} placed, total ${order['total']:.2f}")

            await follow_order(client, order["id"], watch, interval)

            if rating:
                print("\n6️⃣ Rating the order...")
                rated = await call(
                    client, "POST", f"/api/orders/{order['id']}/rating",
                    json={"rating": rating, "review": "Hot and on time"},
                )
                print(f"   ✅ Rated {rated['rating']}/5")

            print("\n7️⃣ Reordering...")
            cart = await call(client, "POST", f"/api/orders/{order['id']}/reorder")
            print_cart(cart)

        except (FlowError, httpx.HTTPError) as e:
            print(f"\n❌ Flow failed: {e}")
            return False

    print("\n" + "=" * 70)
    print(f"✅ Flow complete in {time.time() - start_time:.1f}s")
    print("=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Flow Simulation Script")
    parser.add_argument("--base-url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--watch", action="store_true", help="Wait for the tracking timers")
    parser.add_argument("--interval", type=float, default=2.0, help="Polling interval in --watch mode")
    parser.add_argument("--rating", type=int, default=5, help="Rating to leave, 0 to skip")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    ok = asyncio.run(run_flow(watch=args.watch, interval=args.interval, rating=args.rating or None))
    sys.exit(0 if ok else 1)
