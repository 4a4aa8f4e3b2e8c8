from __future__ import annotations

import logging
import secrets
import string
from typing import List, Optional, Tuple

from sqlalchemy import and_, func
from sqlmodel import Session, select

from ..errors import ConflictError, InvalidRequestError, NotFoundError, PermissionDeniedError
from ..models import (
    EVENT_VIEWED,
    ROLE_VETERINARIAN,
    Catalog,
    CatalogEvent,
    Product,
    ProductLike,
    User,
)
from ..products.service import discard_image
from ..storage import ImageStorage

logger = logging.getLogger(__name__)

ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_LENGTH = 8
ACCESS_CODE_ATTEMPTS = 10
RECENTLY_VIEWED_LIMIT = 10


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


def _unused_access_code(session: Session) -> str:
    for _ in range(ACCESS_CODE_ATTEMPTS):
        code = generate_access_code()
        taken = session.exec(select(Catalog.id).where(Catalog.access_code == code)).first()
        if taken is None:
            return code
        logger.warning("Access code collision, retrying")
    raise ConflictError("Could not allocate a unique access code.")


def get_owned_catalog(session: Session, catalog_id: int, vendor_id: int) -> Catalog:
    catalog = session.get(Catalog, catalog_id)
    if not catalog:
        raise NotFoundError(f"Catalog with id {catalog_id} not found.")
    if catalog.vendor_id != vendor_id:
        raise PermissionDeniedError("Forbidden: You do not own this catalog.")
    return catalog


def get_visible_catalog(session: Session, catalog_id: int, vendor_id: int) -> Catalog:
    # read endpoints do not reveal whether someone else's catalog exists
    catalog = session.exec(
        select(Catalog).where(Catalog.id == catalog_id, Catalog.vendor_id == vendor_id)
    ).first()
    if not catalog:
        raise NotFoundError(
            "Catalog not found or you do not have permission to view it."
        )
    return catalog


def create_catalog(
    session: Session, vendor_id: int, name: str, description: Optional[str] = None
) -> Catalog:
    if not name or not name.strip():
        raise InvalidRequestError("Catalog name is required.")
    catalog = Catalog(
        vendor_id=vendor_id,
        name=name.strip(),
        description=description or None,
        access_code=_unused_access_code(session),
    )
    session.add(catalog)
    session.commit()
    session.refresh(catalog)
    logger.info("Vendor %s created catalog %s", vendor_id, catalog.id)
    return catalog


def update_catalog(
    session: Session,
    vendor_id: int,
    catalog_id: int,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    regenerate_access_code: bool = False,
) -> Catalog:
    catalog = get_owned_catalog(session, catalog_id, vendor_id)
    if name is not None:
        if not name.strip():
            raise InvalidRequestError("Catalog name cannot be empty.")
        catalog.name = name.strip()
    if description is not None:
        catalog.description = description or None
    if regenerate_access_code:
        catalog.access_code = _unused_access_code(session)
        logger.info("Access code of catalog %s regenerated", catalog_id)
    session.add(catalog)
    session.commit()
    session.refresh(catalog)
    return catalog


def delete_catalog(
    session: Session,
    vendor_id: int,
    catalog_id: int,
    storage: Optional[ImageStorage] = None,
) -> None:
    catalog = get_owned_catalog(session, catalog_id, vendor_id)
    image_urls = [
        url
        for url in session.exec(
            select(Product.image_url).where(Product.catalog_id == catalog_id)
        )
        if url
    ]
    session.delete(catalog)
    session.commit()
    logger.info("Vendor %s deleted catalog %s", vendor_id, catalog_id)
    if storage is not None:
        for url in image_urls:
            discard_image(storage, url)


def list_vendor_catalogs(session: Session, vendor_id: int) -> List[Tuple[Catalog, int]]:
    rows = session.exec(
        select(Catalog, func.count(Product.id).label("product_count"))
        .outerjoin(Product, Product.catalog_id == Catalog.id)
        .where(Catalog.vendor_id == vendor_id)
        .group_by(Catalog.id)
        .order_by(Catalog.id.desc())
    ).all()
    return [(catalog, count) for catalog, count in rows]


def get_catalog_with_products(
    session: Session, vendor_id: int, catalog_id: int
) -> Tuple[Catalog, List[Product]]:
    catalog = get_visible_catalog(session, catalog_id, vendor_id)
    products = session.exec(
        select(Product)
        .where(Product.catalog_id == catalog.id)
        .order_by(Product.name, Product.id)
    ).all()
    return catalog, list(products)


def open_shared_catalog(
    session: Session, access_code: str, user_id: int, role: str
) -> Tuple[Catalog, str, List[Tuple[Product, bool]]]:
    """Resolve an access code for a reader, recording a view for veterinarians.

    Returns the catalog, the vendor's display name and each product paired
    with whether the reader has liked it.
    """
    row = session.exec(
        select(Catalog, User.name)
        .join(User, Catalog.vendor_id == User.id)
        .where(Catalog.access_code == access_code.strip().upper())
    ).first()
    if not row:
        raise NotFoundError("Catalog not found.")
    catalog, vendor_name = row

    if role == ROLE_VETERINARIAN:
        session.add(CatalogEvent(user_id=user_id, catalog_id=catalog.id, event_type=EVENT_VIEWED))
        session.commit()
        session.refresh(catalog)

    rows = session.exec(
        select(Product, ProductLike.id)
        .outerjoin(
            ProductLike,
            and_(ProductLike.product_id == Product.id, ProductLike.user_id == user_id),
        )
        .where(Product.catalog_id == catalog.id)
        .order_by(Product.id)
    ).all()
    return catalog, vendor_name, [(product, like_id is not None) for product, like_id in rows]


def recently_viewed(session: Session, user_id: int, limit: int = RECENTLY_VIEWED_LIMIT) -> List[dict]:
    last_views = (
        select(
            CatalogEvent.catalog_id,
            func.max(CatalogEvent.created_at).label("last_viewed_at"),
        )
        .where(CatalogEvent.user_id == user_id, CatalogEvent.event_type == EVENT_VIEWED)
        .group_by(CatalogEvent.catalog_id)
        .subquery("recent_events")
    )
    rows = session.exec(
        select(
            Catalog.id,
            Catalog.name,
            Catalog.description,
            Catalog.access_code,
            User.name.label("vendor_name"),
            last_views.c.last_viewed_at,
        )
        .join(last_views, Catalog.id == last_views.c.catalog_id)
        .join(User, Catalog.vendor_id == User.id)
        .order_by(last_views.c.last_viewed_at.desc(), Catalog.id.desc())
        .limit(limit)
    ).all()
    return [dict(row._mapping) for row in rows]
