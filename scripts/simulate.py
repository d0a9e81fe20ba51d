"""
Concurrency Simulation Script

Fires many full order lifecycles at the API at once:
create → read → reassign waiter → list by waiter → replace → delete.
Run from project root: python scripts/simulate.py
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

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
TOTAL_CYCLES = 50

# Sample data for random orders
WAITERS = ["Alice", "Bob", "Carmen", "Dmitri", "Eun-ji", "Farid", "Greta", "Hugo"]
MENU = [
    ("Pizza Margherita", 14.99),
    ("Pasta Carbonara", 13.99),
    ("Caesar Salad", 8.99),
    ("Garlic Bread", 5.99),
    ("Risotto", 16.5),
    ("Tiramisu", 7.99),
]
TABLES = [f"T{n}" for n in range(1, 21)]


class CycleFailure(Exception):
    """A step of an order lifecycle returned something unexpected."""


def generate_order_payload(cycle_num: int) -> dict[str, Any]:
    """Generate a random order; the waiter name is unique to the cycle."""
    dish, price = random.choice(MENU)
    return {
        "dish": dish,
        "price": price,
        "server": f"{random.choice(WAITERS)}-{cycle_num}",
        "table": random.choice(TABLES),
    }


def _expect(response: httpx.Response, status_code: int, step: str) -> Any:
    if response.status_code != status_code:
        raise CycleFailure(f"{step}: HTTP {response.status_code} {response.text[:100]}")
    return response.json()


async def run_order_cycle(
    client: httpx.AsyncClient,
    cycle_num: int,
    base_url: str = API_BASE_URL,
) -> dict[str, Any]:
    """Drive one order through its whole lifecycle and check every answer."""
    payload = generate_order_payload(cycle_num)
    start_time = time.time()

    try:
        created = _expect(
            await client.post(f"{base_url}/order/create", json=payload, timeout=30.0),
            200, "create",
        )
        order_id = created["InsertedID"]

        fetched = _expect(await client.get(f"{base_url}/order/{order_id}/"), 200, "get")
        if {k: fetched[k] for k in payload} != payload:
            raise CycleFailure(f"get: stored order differs from {payload}")

        new_waiter = f"{payload['server']}-relief"
        modified = _expect(
            await client.put(f"{base_url}/waiter/update/{order_id}", json={"server": new_waiter}),
            200, "update waiter",
        )
        if modified != 1:
            raise CycleFailure(f"update waiter: modified {modified}")

        by_waiter = _expect(await client.get(f"{base_url}/waiter/{new_waiter}"), 200, "by waiter")
        if [o["_id"] for o in by_waiter] != [order_id]:
            raise CycleFailure(f"by waiter: unexpected orders {by_waiter}")

        modified = _expect(
            await client.put(f"{base_url}/order/update/{order_id}", json={"dish": "Espresso"}),
            200, "replace",
        )
        if modified != 1:
            raise CycleFailure(f"replace: modified {modified}")

        deleted = _expect(await client.delete(f"{base_url}/order/delete/{order_id}"), 200, "delete")
        if deleted != 1:
            raise CycleFailure(f"delete: deleted {deleted}")

        _expect(await client.get(f"{base_url}/order/{order_id}/"), 500, "get after delete")

        return {
            "cycle_num": cycle_num,
            "success": True,
            "order_id": order_id,
            "time": round(time.time() - start_time, 3),
        }
    except (CycleFailure, httpx.HTTPError, KeyError, ValueError) as e:
        return {
            "cycle_num": cycle_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    num_cycles: int = TOTAL_CYCLES,
    base_url: str = API_BASE_URL,
    client: Optional[httpx.AsyncClient] = None,
    verbose: bool = True,
) -> dict[str, Any]:
    """
    Run the concurrency simulation.

    Args:
        num_cycles: Number of order lifecycles to run at once
        base_url: API root
        client: Client to reuse (a new one is opened when omitted)
        verbose: Print the report
    """
    start_time = time.time()

    if client is None:
        async with httpx.AsyncClient() as own_client:
            results = await asyncio.gather(
                *(run_order_cycle(own_client, i + 1, base_url) for i in range(num_cycles))
            )
    else:
        results = await asyncio.gather(
            *(run_order_cycle(client, i + 1, base_url) for i in range(num_cycles))
        )

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    if verbose:
        print("=" * 70)
        print("SIMULATION RESULTS")
        print("=" * 70)
        print(f"Target: {base_url}")
        print(f"Finished: {datetime.now().strftime('%H:%M:%S')}")
        print(f"Successful cycles: {len(successful)}/{num_cycles}")
        print(f"Failed cycles: {len(failed)}/{num_cycles}")
        print(f"Total time: {total_time}s")
        if successful:
            times = [r["time"] for r in successful]
            print(f"Average cycle: {round(sum(times) / len(times), 3)}s")
            print(f"Fastest: {min(times)}s  Slowest: {max(times)}s")
        for f in failed[:5]:
            print(f"   Cycle #{f['cycle_num']}: {f['error']}")
        print("=" * 70)

    return {
        "total": num_cycles,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order lifecycle simulation")
    parser.add_argument("--cycles", type=int, default=TOTAL_CYCLES, help="Number of lifecycles")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(num_cycles=args.cycles, base_url=args.url))
    sys.exit(0 if summary["failed"] == 0 else 1)
