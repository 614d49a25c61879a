"""
tests.test_status_api

Order/driver endpoints: persistence, auth gating, and the events they publish.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from oishine_backoffice.realtime.topics import ADMIN_TOPIC, driver_topic, order_topic

from conftest import bearer, login, seed_admin

ORDER = {
    "customer_name": "Sakura",
    "phone": "+62 812 0000",
    "address": "Jl. Sudirman 1",
    "total": 125000,
}


class Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def send_json(self, data: Any) -> None:
        self.messages.append(data)


@pytest.mark.asyncio
async def test_create_order_announces_on_admin_feed(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    feed = Recorder()
    app.state.broadcaster.subscribe(feed, ADMIN_TOPIC)

    r = await client.post("/v1/orders", json=ORDER)
    assert r.status_code == 201
    order = r.json()["data"]
    assert order["status"] == "PENDING"

    await app.state.broadcaster.flush()
    assert len(feed.messages) == 1
    event = feed.messages[0]
    assert event["topic"] == ADMIN_TOPIC
    assert event["payload"]["event"] == "order.created"
    assert event["payload"]["order"]["id"] == order["id"]


@pytest.mark.asyncio
async def test_order_status_transition_is_broadcast(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    await seed_admin(app)
    token = await login(client)
    order_id = (await client.post("/v1/orders", json=ORDER)).json()["data"]["id"]

    tracker = Recorder()
    app.state.broadcaster.subscribe(tracker, order_topic(order_id))

    r = await client.patch(
        f"/v1/admin/orders/{order_id}/status",
        headers=bearer(token),
        json={"status": "out_for_delivery"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "OUT_FOR_DELIVERY"

    await app.state.broadcaster.flush()
    assert [m["payload"]["order"]["status"] for m in tracker.messages] == ["OUT_FOR_DELIVERY"]
    assert tracker.messages[0]["payload"]["event"] == "order.status"

    r = await client.get("/v1/admin/orders", headers=bearer(token), params={"status": "pending"})
    assert r.json()["data"] == []
    r = await client.get(
        "/v1/admin/orders", headers=bearer(token), params={"status": "OUT_FOR_DELIVERY"}
    )
    assert [o["id"] for o in r.json()["data"]] == [order_id]


@pytest.mark.asyncio
async def test_order_status_errors(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    token = await login(client)
    order_id = (await client.post("/v1/orders", json=ORDER)).json()["data"]["id"]

    r = await client.patch(f"/v1/admin/orders/{order_id}/status", json={"status": "READY"})
    assert r.status_code == 401
    assert r.json() == {"error": "Token not found", "status": 401}

    r = await client.patch(
        f"/v1/admin/orders/{order_id}/status", headers=bearer(token), json={"status": "TELEPORTED"}
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid status"

    r = await client.patch(
        "/v1/admin/orders/missing/status", headers=bearer(token), json={"status": "READY"}
    )
    assert r.status_code == 404
    assert r.json() == {"error": "Order with ID missing not found", "status": 404}


@pytest.mark.asyncio
async def test_invalid_order_payload_is_400(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/orders", json={**ORDER, "total": -1})
    assert r.status_code == 400
    assert r.json()["status"] == 400
    assert "total" in r.json()["error"]


@pytest.mark.asyncio
async def test_driver_status_update(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    token = await login(client)

    r = await client.post(
        "/v1/admin/drivers", headers=bearer(token), json={"name": "Budi", "phone": "0812"}
    )
    assert r.status_code == 201
    driver = r.json()["data"]
    assert driver["status"] == "OFFLINE"

    watcher, feed = Recorder(), Recorder()
    app.state.broadcaster.subscribe(watcher, driver_topic(driver["id"]))
    app.state.broadcaster.subscribe(feed, ADMIN_TOPIC)

    r = await client.put(
        f"/v1/admin/drivers/{driver['id']}/status",
        headers=bearer(token),
        json={"status": "BUSY", "location": {"lat": -6.2, "lng": 106.8}},
    )
    assert r.status_code == 200
    assert r.json()["data"]["current_location"] == {"lat": -6.2, "lng": 106.8}

    # Status-only update keeps the last known position.
    r = await client.put(
        f"/v1/admin/drivers/{driver['id']}/status",
        headers=bearer(token),
        json={"status": "AVAILABLE"},
    )
    assert r.json()["data"]["current_location"] == {"lat": -6.2, "lng": 106.8}

    await app.state.broadcaster.flush()
    statuses = [m["payload"]["driver"]["status"] for m in watcher.messages]
    assert statuses == ["BUSY", "AVAILABLE"]
    assert [m["payload"]["event"] for m in feed.messages] == ["driver.status", "driver.status"]


@pytest.mark.asyncio
async def test_driver_status_validation(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    token = await login(client)
    driver_id = (
        await client.post(
            "/v1/admin/drivers", headers=bearer(token), json={"name": "Budi", "phone": "0812"}
        )
    ).json()["data"]["id"]

    r = await client.put(
        f"/v1/admin/drivers/{driver_id}/status",
        headers=bearer(token),
        json={"status": "AVAILABLE", "location": {"lat": 91, "lng": 0}},
    )
    assert r.status_code == 400

    r = await client.put(
        f"/v1/admin/drivers/{driver_id}/status", headers=bearer(token), json={"status": "NAPPING"}
    )
    assert r.status_code == 400

    r = await client.put(
        "/v1/admin/drivers/missing/status", headers=bearer(token), json={"status": "BUSY"}
    )
    assert r.status_code == 404
    assert r.json()["error"] == "Driver not found"
