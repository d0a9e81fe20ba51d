"""Runs the lifecycle simulation script against the app in process."""

import asyncio

import httpx

from app.main import app
from scripts.simulate import generate_order_payload, run_simulation


def test_generated_payload_is_a_valid_order():
    payload = generate_order_payload(7)

    assert set(payload) == {"dish", "price", "server", "table"}
    assert payload["server"].endswith("-7")


def test_concurrent_lifecycles_succeed(client):
    async def simulate():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            return await run_simulation(num_cycles=10, base_url="http://test", client=http, verbose=False)

    summary = asyncio.run(simulate())

    assert summary["failed"] == 0, summary["results"]
    assert summary["successful"] == 10
    assert client.get("/orders").json() == []
