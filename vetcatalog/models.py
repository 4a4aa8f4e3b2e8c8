from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


ROLE_VENDOR = "vendor"
ROLE_VETERINARIAN = "veterinarian"
ROLES = (ROLE_VETERINARIAN, ROLE_VENDOR)

EVENT_LIKED = "liked"
EVENT_UNLIKED = "unliked"
EVENT_BUDGET_REQUESTED = "budget_requested"
EVENT_VIEWED = "viewed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCTimestamp(TypeDecorator):
    """Stored as naive UTC, loaded as timezone-aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone_number: str
    password_hash: str
    role: str = Field(default=ROLE_VETERINARIAN)  # 'veterinarian' | 'vendor'
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)


class Catalog(SQLModel, table=True):
    __tablename__ = "catalogs"

    id: Optional[int] = Field(default=None, primary_key=True)
    vendor_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    name: str
    description: Optional[str] = None
    access_code: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    catalog_id: int = Field(foreign_key="catalogs.id", index=True, ondelete="CASCADE")
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)


class ProductLike(SQLModel, table=True):
    __tablename__ = "product_likes"
    __table_args__ = (UniqueConstraint("user_id", "product_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE")
    product_id: int = Field(foreign_key="products.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)


class ProductEvent(SQLModel, table=True):
    __tablename__ = "product_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE")
    product_id: int = Field(foreign_key="products.id", index=True, ondelete="CASCADE")
    event_type: str  # liked | unliked | budget_requested
    message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)


class CatalogEvent(SQLModel, table=True):
    __tablename__ = "catalog_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE")
    catalog_id: int = Field(foreign_key="catalogs.id", index=True, ondelete="CASCADE")
    event_type: str = EVENT_VIEWED
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCTimestamp)
