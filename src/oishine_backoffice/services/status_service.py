"""
oishine_backoffice.services.status_service

Order and driver status changes, followed by realtime notification.

Responsibilities:
- Persist order creation / order status transitions / driver status updates.
- Publish the new snapshot to the entity's topic and the admin feed, only
  after the change is committed.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from oishine_backoffice.db.models import Driver, DriverStatus, Order, OrderStatus
from oishine_backoffice.db.repositories.drivers import DriverRepo
from oishine_backoffice.db.repositories.orders import OrderRepo
from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.realtime.topics import ADMIN_TOPIC, driver_topic, order_topic
from oishine_backoffice.services.errors import ServiceError


def order_to_dict(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "customer_name": order.customer_name,
        "phone": order.phone,
        "address": order.address,
        "notes": order.notes,
        "total": order.total,
        "status": order.status.value,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
    }


def driver_to_dict(driver: Driver) -> dict[str, Any]:
    return {
        "id": driver.id,
        "name": driver.name,
        "phone": driver.phone,
        "status": driver.status.value,
        "current_location": driver.current_location,
        "updated_at": driver.updated_at.isoformat(),
    }


class StatusService:
    def __init__(self, *, session: AsyncSession, broadcaster: Broadcaster) -> None:
        self._session = session
        self._broadcaster = broadcaster
        self._orders = OrderRepo(session)
        self._drivers = DriverRepo(session)

    async def create_order(
        self,
        *,
        customer_name: str,
        phone: str,
        address: str,
        total: float,
        notes: str | None = None,
    ) -> dict[str, Any]:
        order = await self._orders.create(
            customer_name=customer_name, phone=phone, address=address, total=total, notes=notes
        )
        await self._session.commit()
        snapshot = order_to_dict(order)
        self._notify(order_topic(order.id), {"event": "order.created", "order": snapshot})
        return snapshot

    async def list_orders(self, *, status: OrderStatus | None = None) -> list[dict[str, Any]]:
        return [order_to_dict(o) for o in await self._orders.list_recent(status=status)]

    async def set_order_status(self, *, order_id: str, status: OrderStatus) -> dict[str, Any]:
        order = await self._orders.set_status(order_id, status)
        if order is None:
            raise ServiceError(
                f"Order with ID {order_id} not found", status_code=HTTP_404_NOT_FOUND
            )
        await self._session.commit()
        snapshot = order_to_dict(order)
        self._notify(order_topic(order.id), {"event": "order.status", "order": snapshot})
        return snapshot

    async def register_driver(self, *, name: str, phone: str) -> dict[str, Any]:
        driver = await self._drivers.create(name=name, phone=phone)
        await self._session.commit()
        return driver_to_dict(driver)

    async def set_driver_status(
        self,
        *,
        driver_id: str,
        status: DriverStatus,
        location: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        driver = await self._drivers.set_status(driver_id, status=status, location=location)
        if driver is None:
            raise ServiceError("Driver not found", status_code=HTTP_404_NOT_FOUND)
        await self._session.commit()
        snapshot = driver_to_dict(driver)
        self._notify(driver_topic(driver.id), {"event": "driver.status", "driver": snapshot})
        return snapshot

    def _notify(self, topic: str, payload: dict[str, Any]) -> None:
        # Entity topic first, then the admin-wide feed.
        self._broadcaster.publish(topic, payload)
        self._broadcaster.publish(ADMIN_TOPIC, payload)
