from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from sqlmodel import Session, SQLModel

from vetcatalog import models  # noqa: F401  (registers the tables)
from vetcatalog.db import build_engine
from vetcatalog.models import (
    ROLE_VENDOR,
    ROLE_VETERINARIAN,
    Catalog,
    Product,
    User,
)
from vetcatalog.storage import ImageStorage


def memory_engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    return engine


def make_user(
    session: Session,
    name: str,
    role: str = ROLE_VETERINARIAN,
    email: Optional[str] = None,
) -> User:
    user = User(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        phone_number="555-0100",
        password_hash="not-a-real-hash",
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_vendor(session: Session, name: str = "Vendor") -> User:
    return make_user(session, name, role=ROLE_VENDOR)


def make_catalog(session: Session, vendor: User, name: str = "Catalog", code: Optional[str] = None) -> Catalog:
    catalog = Catalog(
        vendor_id=vendor.id,
        name=name,
        access_code=code or f"CODE{vendor.id:02d}{name[:2].upper()}",
    )
    session.add(catalog)
    session.commit()
    session.refresh(catalog)
    return catalog


def make_product(session: Session, catalog: Catalog, name: str, image_url: Optional[str] = None) -> Product:
    product = Product(catalog_id=catalog.id, name=name, image_url=image_url)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def at(minute: int) -> datetime:
    return datetime(2025, 10, 4, 13, minute, 0, tzinfo=timezone.utc)


class MemoryImageStorage(ImageStorage):
    name = "memory"
    base_url = "https://images.test"

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.deleted: list = []

    def save(self, key, data, content_type=None):
        self.objects[key] = data
        return f"{self.base_url}/{key}"

    def key_for_url(self, url):
        prefix = f"{self.base_url}/"
        return url[len(prefix):] if url.startswith(prefix) else None

    def delete(self, url):
        self.deleted.append(url)
        key = self.key_for_url(url)
        if key:
            self.objects.pop(key, None)
