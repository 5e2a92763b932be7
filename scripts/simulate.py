"""
Ordering Flow Simulation Script

Drives a running API through browse → add to cart → checkout cycles and
reports what happened. Start the API first (ENV_MODE=development uses the
mock catalog), then run from project root: python scripts/simulate.py
"""

import asyncio
import random
import time
import argparse
from datetime import datetime
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 5


async def browse_catalog(client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Load every catalog page and return the cuisines."""
    response = await client.get(f"{API_BASE_URL}/api/cuisines")
    response.raise_for_status()
    data = response.json()

    while data.get("has_more_pages"):
        response = await client.post(f"{API_BASE_URL}/api/cuisines/more")
        response.raise_for_status()
        more = response.json()
        if len(more["cuisines"]) == len(data["cuisines"]):
            break
        data = more

    return data["cuisines"]


async def fill_cart(client: httpx.AsyncClient, cuisines: list[dict[str, Any]]) -> dict[str, Any]:
    """Add a few random dishes, some of them more than once."""
    cart: dict[str, Any] = {}
    for _ in range(random.randint(1, 4)):
        cuisine = random.choice(cuisines)
        if not cuisine["items"]:
            continue
        item = random.choice(cuisine["items"])
        for _ in range(random.randint(1, 3)):
            response = await client.post(
                f"{API_BASE_URL}/api/cart/items",
                json={"cuisine_id": cuisine["cuisine_id"], "item": item},
            )
            response.raise_for_status()
            cart = response.json()
    return cart


async def place_order(client: httpx.AsyncClient, order_num: int, cuisines: list) -> dict[str, Any]:
    """Fill the cart and check out once."""
    start_time = time.time()
    try:
        cart = await fill_cart(client, cuisines)
        response = await client.post(f"{API_BASE_URL}/api/checkout", timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "transaction": data.get("transaction_reference"),
                "total": cart.get("grand_total", 0.0),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the ordering simulation.

    Orders are placed one after another: a session has a single cart.
    """
    print("=" * 70)
    print("🍛 ORDERING FLOW SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    results = []
    start_time = time.time()

    async with httpx.AsyncClient() as client:
        health = await client.get(f"{API_BASE_URL}/health")
        print(f"\n❤️  Health: {health.json().get('status')}")

        cuisines = await browse_catalog(client)
        print(f"📚 Cuisines loaded: {len(cuisines)}")

        top = await client.get(f"{API_BASE_URL}/api/top-dishes")
        for dish in top.json().get("dishes", []):
            print(f"   ⭐ {dish['name']} ({dish['rating']})")

        for i in range(num_orders):
            results.append(await place_order(client, i + 1, cuisines))

        orders = (await client.get(f"{API_BASE_URL}/api/orders")).json()

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"🧾 Orders kept in history: {orders.get('total')}")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total", 0) for r in successful)
        print(f"\n📈 Average Checkout: {avg_time}s")
        print(f"   💰 Total Charged: ₹{total_revenue:.2f}")

    if failed:
        print(f"\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ordering Flow Simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(args.orders))
