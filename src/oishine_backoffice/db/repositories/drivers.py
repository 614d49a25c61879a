from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from oishine_backoffice.db.models import Driver, DriverStatus


class DriverRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, name: str, phone: str, status: DriverStatus = DriverStatus.offline
    ) -> Driver:
        driver = Driver(name=name, phone=phone, status=status)
        self._session.add(driver)
        await self._session.flush()
        return driver

    async def set_status(
        self,
        driver_id: str,
        *,
        status: DriverStatus,
        location: dict[str, Any] | None = None,
    ) -> Driver | None:
        driver = await self._session.get(Driver, driver_id, with_for_update=True)
        if driver is None:
            return None
        driver.status = status
        # A status change without a position keeps the last known location.
        if location is not None:
            driver.current_location = location
        await self._session.flush()
        return driver
