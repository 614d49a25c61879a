"""
oishine_backoffice.api.routers.orders

Order endpoints that feed the realtime channel.

Responsibilities:
- Public order creation (announced on the admin feed).
- Admin order listing and status transitions (announced on `order:<id>` and the admin feed).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST

from oishine_backoffice.api.deps import broadcaster_dep, db_session
from oishine_backoffice.auth.deps import get_current_admin
from oishine_backoffice.db.models import OrderStatus
from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.services.status_service import StatusService

router = APIRouter(tags=["orders"])


class OrderCreateRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=256)
    phone: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1, max_length=2000)
    total: float = Field(ge=0)
    notes: str | None = Field(default=None, max_length=2000)


class OrderStatusRequest(BaseModel):
    status: str = Field(min_length=1, max_length=32)


def _parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw.strip().upper())
    except ValueError as e:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid status") from e


@router.post("/v1/orders", status_code=HTTP_201_CREATED)
async def create_order(
    body: OrderCreateRequest,
    session: AsyncSession = Depends(db_session),
    broadcaster: Broadcaster = Depends(broadcaster_dep),
) -> dict[str, Any]:
    order = await StatusService(session=session, broadcaster=broadcaster).create_order(
        customer_name=body.customer_name,
        phone=body.phone,
        address=body.address,
        total=body.total,
        notes=body.notes,
    )
    return {"success": True, "data": order}


@router.get("/v1/admin/orders", dependencies=[Depends(get_current_admin)])
async def list_orders(
    status: str | None = None,
    session: AsyncSession = Depends(db_session),
    broadcaster: Broadcaster = Depends(broadcaster_dep),
) -> dict[str, Any]:
    wanted = _parse_status(status) if status else None
    orders = await StatusService(session=session, broadcaster=broadcaster).list_orders(
        status=wanted
    )
    return {"success": True, "data": orders}


@router.patch("/v1/admin/orders/{order_id}/status", dependencies=[Depends(get_current_admin)])
async def update_order_status(
    order_id: str,
    body: OrderStatusRequest,
    session: AsyncSession = Depends(db_session),
    broadcaster: Broadcaster = Depends(broadcaster_dep),
) -> dict[str, Any]:
    order = await StatusService(session=session, broadcaster=broadcaster).set_order_status(
        order_id=order_id, status=_parse_status(body.status)
    )
    return {"success": True, "data": order}
