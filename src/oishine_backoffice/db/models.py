"""
oishine_backoffice.db.models

Persistence schema for the back-office core.

Responsibilities:
- Define ORM models:
  - Admin: back-office identity (credentials, role, active flag)
  - Order: storefront order whose status transitions are broadcast
  - Driver: delivery driver whose status/location changes are broadcast
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Enum, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oishine_backoffice.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps; SQLite has no timezone-aware column type.
    return datetime.now(UTC).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid.uuid4())


class AdminRole(enum.StrEnum):
    admin = "ADMIN"
    super_admin = "SUPER_ADMIN"


class OrderStatus(enum.StrEnum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    preparing = "PREPARING"
    ready = "READY"
    out_for_delivery = "OUT_FOR_DELIVERY"
    delivered = "DELIVERED"
    cancelled = "CANCELLED"


class DriverStatus(enum.StrEnum):
    available = "AVAILABLE"
    busy = "BUSY"
    offline = "OFFLINE"
    on_break = "ON_BREAK"


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[AdminRole] = mapped_column(
        Enum(AdminRole), nullable=False, default=AdminRole.admin
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    customer_name: Mapped[str] = mapped_column(String(256), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    total: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), nullable=False, default=OrderStatus.pending, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("ix_orders_status_created", "status", "created_at"),)


class Driver(Base):
    __tablename__ = "drivers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[DriverStatus] = mapped_column(
        Enum(DriverStatus), nullable=False, default=DriverStatus.offline, index=True
    )
    # {"lat": float, "lng": float}; null until the driver reports a position.
    current_location: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Module Notes -----------------------------------------------------------
# Enum values are stored in the DB and appear on the wire; treat them as a stable contract.
