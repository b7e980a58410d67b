"""
Stock Contention Simulation Script

Fires many concurrent orders for the same menu item at a running server
and checks that stock never goes negative and that every unit sold is
accounted for.
Run from project root: python scripts/simulate.py --orders 50

Start the server and seed the menu first:
    python scripts/seed_db.py
    uvicorn restaurant_pos.main:create_app --factory --port 8001
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50

FIRST_NAMES = ["Asha", "Rohan", "Meera", "Kabir", "Tara", "Nikhil", "Leela", "Arjun"]


async def fetch_item(client: httpx.AsyncClient, name: Optional[str]) -> dict[str, Any]:
    """Pick the target menu item (by name, or the one with the least stock)."""
    response = await client.get(f"{API_BASE_URL}/menu")
    response.raise_for_status()
    items = response.json()
    if not items:
        raise SystemExit("❌ Menu is empty. Run: python scripts/seed_db.py")
    if name:
        matches = [i for i in items if i["name"].lower() == name.lower()]
        if not matches:
            raise SystemExit(f"❌ No menu item named {name!r}")
        return matches[0]
    return min(items, key=lambda i: i["currentStock"])


async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    item: dict[str, Any],
    quantity: int,
) -> dict[str, Any]:
    """Place one order for ``quantity`` units of ``item``."""
    payload = {
        "customerName": random.choice(FIRST_NAMES),
        "items": [{
            "menuItemId": item["id"],
            "name": item["name"],
            "price": item["price"],
            "quantity": quantity,
        }],
        "totalAmount": item["price"] * quantity,
    }
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            return {"order_num": order_num, "success": True, "quantity": quantity, "time": elapsed}
        return {
            "order_num": order_num,
            "success": False,
            "quantity": quantity,
            "status": response.status_code,
            "error": response.json().get("message", response.text)[:100],
            "time": elapsed,
        }
    except Exception as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "quantity": quantity,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_simulation(
    num_orders: int = TOTAL_ORDERS,
    item_name: Optional[str] = None,
    max_quantity: int = 3,
) -> dict[str, Any]:
    """
    Run the contention simulation.

    Args:
        num_orders: Number of concurrent orders
        item_name: Menu item to hammer (default: lowest stock)
        max_quantity: Upper bound for the random quantity per order
    """
    async with httpx.AsyncClient() as client:
        item = await fetch_item(client, item_name)
        stock_before = item["currentStock"]

        print("=" * 70)
        print("🔥 STOCK CONTENTION SIMULATION")
        print("=" * 70)
        print(f"📋 Total Orders: {num_orders}")
        print(f"🍽️  Item: {item['name']} (stock {stock_before})")
        print(f"🎯 Target: {API_BASE_URL}")
        print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
        print("=" * 70)

        start_time = time.time()
        tasks = [
            send_order(client, i + 1, item, random.randint(1, max_quantity))
            for i in range(num_orders)
        ]
        results = await asyncio.gather(*tasks)
        total_time = round(time.time() - start_time, 2)

        stock_after = (await fetch_item(client, item["name"]))["currentStock"]

    successful = [r for r in results if r["success"]]
    rejected = [r for r in results if not r["success"] and r.get("status") == 400]
    errored = [r for r in results if not r["success"] and r.get("status") != 400]
    units_sold = sum(r["quantity"] for r in successful)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Placed: {len(successful)}/{num_orders} ({units_sold} units)")
    print(f"🚫 Rejected (insufficient stock): {len(rejected)}")
    print(f"❌ Errors: {len(errored)}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"\n📦 Stock: {stock_before} → {stock_after}")

    conserved = stock_before - units_sold == stock_after
    print(f"{'✅' if stock_after >= 0 else '❌'} Stock never negative: {stock_after >= 0}")
    print(f"{'✅' if conserved else '❌'} Units conserved: {conserved}")

    if errored:
        print("\n⚠️  Error details (showing first 5):")
        for r in errored[:5]:
            print(f"   Order #{r['order_num']}: {r.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "rejected": len(rejected),
        "errors": len(errored),
        "units_sold": units_sold,
        "stock_before": stock_before,
        "stock_after": stock_after,
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Stock Contention Simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--item", type=str, default=None, help="Menu item name to target")
    parser.add_argument("--max-quantity", type=int, default=3, help="Max units per order")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.orders, args.item, args.max_quantity))
    sys.exit(0 if summary["stock_after"] >= 0 and summary["errors"] == 0 else 1)
