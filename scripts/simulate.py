"""
Service Shift Simulation Script

Drives a running API through a busy dinner service: many staff members
confirming orders at once, guests adding items later, tables being closed.
Run from project root: python scripts/simulate.py

Start the API first (ENV_MODE=development uses the mock recorder and pipeline):
    uvicorn orderpad.main:app --port 8081

Author: OrderPad Team
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8081"
TOTAL_ORDERS = 50

STAFF = ["Ana", "Marco", "Kim", "Sam", "Lee", "Priya", "Tom"]
MENU_ITEMS = [
    "Pizza Margherita", "Pepperoni Pizza", "Caesar Salad", "Garlic Bread",
    "Pasta Carbonara", "Tiramisu", "Coke", "Diet Coke", "Sparkling Water",
    "Glass of House Red", "Espresso", "Lemonade",
]
DESSERTS = ["Tiramisu", "Panna Cotta", "Espresso", "Affogato"]


def generate_items(choices: list[str], max_items: int = 4) -> str:
    """Random order text, one "Nx Item" per line."""
    picked = random.sample(choices, k=random.randint(1, min(max_items, len(choices))))
    return "\n".join(f"{random.randint(1, 3)}x {item}" for item in picked)


def generate_order_payload() -> dict[str, Any]:
    return {
        "transcribedText": generate_items(MENU_ITEMS),
        "audioUri": f"data/recordings/recording_{random.randint(10**12, 10**13)}.m4a",
        "staffName": random.choice(STAFF),
        "duration": f"0:{random.randint(5, 59):02d}",
        "tableNumber": random.randint(1, 30),
        "guestCount": random.randint(1, 8),
    }


def result(table_num: int, started: float, error: Optional[str] = None, **extra: Any) -> dict[str, Any]:
    return {
        "table": table_num,
        "success": error is None,
        "error": error,
        "time": round(time.time() - started, 3),
        **extra,
    }


# =============================================================================
# ONE TABLE'S LIFECYCLE
# =============================================================================

async def serve_table(client: httpx.AsyncClient, table_num: int) -> dict[str, Any]:
    """Confirm an order, maybe add dessert, maybe close the table."""
    start_time = time.time()

    try:
        response = await client.post("/api/orders", json=generate_order_payload())
        if response.status_code != 201:
            return result(table_num, start_time, response.text[:100])
        order = response.json()

        appended = False
        if random.random() < 0.4:
            response = await client.post(
                f"/api/orders/{order['id']}/items",
                json={"text": generate_items(DESSERTS, max_items=2)},
            )
            if response.status_code != 200:
                return result(table_num, start_time, f"append: {response.text[:100]}")
            appended = True

        closed = False
        if random.random() < 0.5:
            response = await client.post(f"/api/orders/{order['id']}/close")
            if response.status_code != 200:
                return result(table_num, start_time, f"close: {response.text[:100]}")
            closed = True

        return result(table_num, start_time, order_id=order["id"], appended=appended, closed=closed)
    except httpx.HTTPError as e:
        return result(table_num, start_time, str(e)[:100])


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the shift simulation.

    Args:
        num_orders: Number of tables served concurrently
    """
    print("=" * 70)
    print("🍽️  SERVICE SHIFT SIMULATION - CONCURRENT ORDER FLOW")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0) as client:
        print("\n🚀 Seating tables...\n")
        results = await asyncio.gather(*(serve_table(client, i + 1) for i in range(num_orders)))

        listing = await client.get("/api/orders", params={"status": "open"})
        open_orders = listing.json()["total"] if listing.status_code == 200 else None

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Tables: {len(successful)}/{num_orders}")
    print(f"❌ Failed Tables: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print("\n📈 Performance Metrics:")
        print(f"   Average Table Flow: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   🍰 Items Added Later: {sum(1 for r in successful if r['appended'])}")
        print(f"   🔒 Tables Closed: {sum(1 for r in successful if r['closed'])}")
        if open_orders is not None:
            print(f"   📂 Open Orders Now: {open_orders}")

    if failed:
        print("\n⚠️  Failed Table Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Table #{f['table']}: {f['error']}")

    print("\n" + "=" * 70)
    print("🔍 VERIFICATION STEPS")
    print("=" * 70)
    print("1. Run: python scripts/verify.py")
    print(f"2. Visit {API_BASE_URL}/docs to browse the orders")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def test_single_flows() -> bool:
    """Walk one order through recording, transcription and confirmation."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=90.0) as client:
        # Test 1: Health check
        print("\n1️⃣ Health Check...")
        response = await client.get("/health")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        data = response.json()
        print(f"   ✅ Status: {data.get('status')}")
        print(f"   Database: {data.get('database')}")
        print(f"   Transcription: {data.get('transcriptionService')}")
        print(f"   Recording: {data.get('recordingService')}")

        # Test 2: Record
        print("\n2️⃣ Recording...")
        response = await client.post("/api/recording/start")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        await asyncio.sleep(1)
        response = await client.post("/api/recording/stop")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        handle = response.json()
        print(f"   ✅ {handle['uri']} ({handle['duration']})")

        # Test 3: Transcribe
        print("\n3️⃣ Transcription...")
        response = await client.post("/api/transcriptions", json={"audioUri": handle["uri"]})
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.json().get('detail', response.text)}")
            return False
        order_text = response.json()["orderText"]
        print("   ✅ " + order_text.replace("\n", "\n      "))

        # Test 4: Confirm
        print("\n4️⃣ Confirm Order...")
        response = await client.post(
            "/api/orders",
            json={
                "transcribedText": order_text,
                "audioUri": handle["uri"],
                "duration": handle["duration"],
                "staffName": random.choice(STAFF),
            },
        )
        if response.status_code != 201:
            print(f"   ❌ Failed: {response.text}")
            return False
        print(f"   ✅ Order #{response.json()['id']} saved")

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Service Shift Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of tables")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual flow tests")
    args = parser.parse_args()

    # Run tests first
    if not args.skip_tests:
        if not asyncio.run(test_single_flows()):
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)

        print("\n✅ Pre-flight tests passed!")
        input("\nPress Enter to start the shift simulation...")

    asyncio.run(run_simulation(num_orders=args.orders))
