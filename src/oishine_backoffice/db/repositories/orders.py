from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from oishine_backoffice.db.models import Order, OrderStatus


class OrderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        customer_name: str,
        phone: str,
        address: str,
        total: float,
        notes: str | None = None,
    ) -> Order:
        order = Order(
            customer_name=customer_name,
            phone=phone,
            address=address,
            total=total,
            notes=notes,
            status=OrderStatus.pending,
        )
        self._session.add(order)
        await self._session.flush()
        return order

    async def list_recent(
        self, *, status: OrderStatus | None = None, limit: int = 200
    ) -> list[Order]:
        stmt = select(Order).order_by(desc(Order.created_at)).limit(limit)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_status(self, order_id: str, status: OrderStatus) -> Order | None:
        order = await self._session.get(Order, order_id, with_for_update=True)
        if order is None:
            return None
        order.status = status
        await self._session.flush()
        return order
