"""
Rush Hour Simulation Script

Opens many concurrent customer connections, each placing a random order and
waiting for its "ready" notice, while polling the admin dashboard to check
that the kitchen never prepares more drinks than its capacity.

Run from project root while the service is up (short brew times help):
    TEA_BREW_SECONDS=1 COFFEE_BREW_SECONDS=2 python -m barista
    python scripts/simulate.py --customers 20

Version: 1.0.0
"""

import argparse
import asyncio
import random
import time
from datetime import datetime
from typing import Any

import httpx

API_BASE_URL = "http://localhost:8001"
CAFE_HOST = "localhost"
CAFE_PORT = 8888
TOTAL_CUSTOMERS = 10

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
DRINKS = ["tea", "coffee"]


def generate_order() -> str:
    """Random ``order ...`` command with one or two parts."""
    parts = [
        f"{random.randint(1, 3)} {random.choice(DRINKS)}"
        for _ in range(random.randint(1, 2))
    ]
    return "order " + " and ".join(parts)


async def visit_cafe(customer_num: int, timeout: float) -> dict[str, Any]:
    """One customer: connect, order, wait for the notice, collect, leave."""
    name = f"{random.choice(FIRST_NAMES)}-{customer_num}"
    command = generate_order()
    start_time = time.time()

    try:
        reader, writer = await asyncio.open_connection(CAFE_HOST, CAFE_PORT)
    except OSError as e:
        return {"customer": name, "success": False, "error": str(e)[:100], "time": 0.0}

    async def send(line: str) -> None:
        writer.write(f"{line}\n".encode())
        await writer.drain()

    async def read_until(predicate) -> str:
        while True:
            raw = await asyncio.wait_for(reader.readline(), timeout=timeout)
            if not raw:
                raise ConnectionError("server hung up")
            line = raw.decode().rstrip("\n")
            if predicate(line):
                return line

    try:
        await reader.readline()  # prompt
        await send(name)
        await read_until(lambda line: line.startswith("Welcome"))
        await send(command)
        confirmation = await read_until(lambda line: not line.startswith("[NOTICE]"))
        if not confirmation.startswith("Order received"):
            return {"customer": name, "success": False, "error": confirmation, "time": 0.0}

        await read_until(lambda line: line.startswith("[NOTICE]"))
        await send("collect")
        collected = await read_until(lambda line: not line.startswith("[NOTICE]"))
        await send("exit")
        elapsed = round(time.time() - start_time, 3)
        return {
            "customer": name,
            "success": collected.startswith("Order collected"),
            "order": command,
            "time": elapsed,
        }
    except (asyncio.TimeoutError, ConnectionError) as e:
        return {
            "customer": name,
            "success": False,
            "error": str(e)[:100] or type(e).__name__,
            "time": round(time.time() - start_time, 3),
        }
    finally:
        writer.close()


async def watch_kitchen(client: httpx.AsyncClient, stop: asyncio.Event) -> dict[str, int]:
    """Poll the dashboard until ``stop`` is set; track the busiest moment."""
    peak = {"preparing": 0, "capacity": 0, "violations": 0, "samples": 0}
    while not stop.is_set():
        try:
            response = await client.get(f"{API_BASE_URL}/api/dashboard-data", timeout=5.0)
            data = response.json()
            peak["samples"] += 1
            peak["capacity"] = data["capacity"]
            peak["preparing"] = max(peak["preparing"], data["preparing"])
            if data["preparing"] > data["capacity"]:
                peak["violations"] += 1
        except httpx.HTTPError as e:
            print(f"   ⚠️ Dashboard poll failed: {e}")
        await asyncio.sleep(0.1)
    return peak


async def run_simulation(num_customers: int = TOTAL_CUSTOMERS, timeout: float = 120.0) -> dict[str, Any]:
    """
    Run the rush hour.

    Args:
        num_customers: Number of concurrent customers
        timeout: Seconds a customer waits for any single line
    """
    print("=" * 70)
    print("☕ RUSH HOUR SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Customers: {num_customers}")
    print(f"🎯 Order counter: {CAFE_HOST}:{CAFE_PORT}")
    print(f"📊 Dashboard: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    stop = asyncio.Event()

    async with httpx.AsyncClient() as client:
        watcher = asyncio.create_task(watch_kitchen(client, stop))
        results = await asyncio.gather(*[visit_cafe(i + 1, timeout) for i in range(num_customers)])
        stop.set()
        peak = await watcher

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Served: {len(successful)}/{num_customers}")
    print(f"❌ Failed: {len(failed)}/{num_customers}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print("\n📈 Wait Times:")
        print(f"   Average: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    print("\n🔥 Kitchen:")
    print(f"   Dashboard samples: {peak['samples']}")
    print(f"   Peak preparing: {peak['preparing']}/{peak['capacity']}")
    if peak["violations"]:
        print(f"   ❌ Capacity exceeded in {peak['violations']} sample(s)!")
    else:
        print("   ✅ Capacity never exceeded")

    if failed:
        print("\n⚠️  Failed Customer Details (showing first 5):")
        for f in failed[:5]:
            print(f"   {f['customer']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_customers,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "peak_preparing": peak["preparing"],
        "capacity_violations": peak["violations"],
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rush Hour Simulation Script")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Number of customers")
    parser.add_argument("--host", default=CAFE_HOST, help="Order counter host")
    parser.add_argument("--port", type=int, default=CAFE_PORT, help="Order counter port")
    parser.add_argument("--api", default=API_BASE_URL, help="Admin API base URL")
    parser.add_argument("--timeout", type=float, default=120.0, help="Per-line wait in seconds")
    args = parser.parse_args()

    CAFE_HOST, CAFE_PORT, API_BASE_URL = args.host, args.port, args.api

    summary = asyncio.run(run_simulation(args.customers, args.timeout))
    raise SystemExit(0 if summary["failed"] == 0 and summary["capacity_violations"] == 0 else 1)
