from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from oishine_backoffice.api.deps import broadcaster_dep, db_session
from oishine_backoffice.auth.deps import get_current_admin
from oishine_backoffice.db.models import DriverStatus
from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.services.status_service import StatusService

router = APIRouter(
    prefix="/v1/admin/drivers",
    tags=["drivers"],
    dependencies=[Depends(get_current_admin)],
)


class DriverCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    phone: str = Field(min_length=1, max_length=64)


class Location(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class DriverStatusRequest(BaseModel):
    status: DriverStatus
    location: Location | None = None


@router.post("", status_code=HTTP_201_CREATED)
async def register_driver(
    body: DriverCreateRequest,
    session: AsyncSession = Depends(db_session),
    broadcaster: Broadcaster = Depends(broadcaster_dep),
) -> dict[str, Any]:
    driver = await StatusService(session=session, broadcaster=broadcaster).register_driver(
        name=body.name, phone=body.phone
    )
    return {"success": True, "data": driver}


@router.put("/{driver_id}/status")
async def update_driver_status(
    driver_id: str,
    body: DriverStatusRequest,
    session: AsyncSession = Depends(db_session),
    broadcaster: Broadcaster = Depends(broadcaster_dep),
) -> dict[str, Any]:
    driver = await StatusService(session=session, broadcaster=broadcaster).set_driver_status(
        driver_id=driver_id,
        status=body.status,
        location=body.location.model_dump() if body.location is not None else None,
    )
    return {"success": True, "data": driver}
