from __future__ import annotations

import logging
from typing import Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import ConflictError, InvalidRequestError, NotFoundError, PermissionDeniedError
from ..models import (
    EVENT_BUDGET_REQUESTED,
    EVENT_LIKED,
    EVENT_UNLIKED,
    Catalog,
    Product,
    ProductEvent,
    ProductLike,
)
from ..storage import ImageStorage, build_object_key
from .schemas import ImageUpload, ProductChanges

logger = logging.getLogger(__name__)


def _store_image(storage: ImageStorage, image: ImageUpload) -> str:
    key = build_object_key("image", image.filename)
    return storage.save(key, image.data, image.content_type)


def discard_image(storage: ImageStorage, url: Optional[str]) -> None:
    """Best-effort removal of a stored image; failures are only logged."""
    if not url:
        return
    try:
        storage.delete(url)
    except Exception:
        logger.exception("Could not delete product image %s", url)


def _commit_or_discard(session: Session, storage: Optional[ImageStorage], image_url: Optional[str]) -> None:
    """Commit, removing a freshly stored image when the commit fails."""
    try:
        session.commit()
    except Exception:
        session.rollback()
        if image_url and storage is not None:
            discard_image(storage, image_url)
        raise


def _owned_catalog(session: Session, catalog_id: int, vendor_id: int) -> Catalog:
    catalog = session.get(Catalog, catalog_id)
    if not catalog:
        raise NotFoundError(f"Catalog with id {catalog_id} not found.")
    if catalog.vendor_id != vendor_id:
        raise PermissionDeniedError("Forbidden: You do not own this catalog.")
    return catalog


def _owned_product(session: Session, product_id: int, vendor_id: int) -> Product:
    row = session.exec(
        select(Product, Catalog.vendor_id)
        .join(Catalog, Product.catalog_id == Catalog.id)
        .where(Product.id == product_id)
    ).first()
    if not row:
        raise NotFoundError(f"Product with id {product_id} not found.")
    product, owner_id = row
    if owner_id != vendor_id:
        raise PermissionDeniedError("Forbidden: You do not own this product.")
    return product


def _existing_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise NotFoundError(f"Product with id {product_id} not found.")
    return product


def add_product(
    session: Session,
    vendor_id: int,
    *,
    name: str,
    catalog_id: int,
    description: Optional[str] = None,
    image: Optional[ImageUpload] = None,
    storage: Optional[ImageStorage] = None,
) -> Product:
    _owned_catalog(session, catalog_id, vendor_id)

    image_url = None
    if image is not None:
        if storage is None:
            raise RuntimeError("An image storage backend is required for uploads")
        image_url = _store_image(storage, image)

    product = Product(
        catalog_id=catalog_id,
        name=name.strip(),
        description=description or None,
        image_url=image_url,
    )
    session.add(product)
    _commit_or_discard(session, storage, image_url)
    session.refresh(product)
    logger.info("Vendor %s added product %s to catalog %s", vendor_id, product.id, catalog_id)
    return product


def update_product(
    session: Session,
    vendor_id: int,
    product_id: int,
    changes: ProductChanges,
    *,
    image: Optional[ImageUpload] = None,
    storage: Optional[ImageStorage] = None,
) -> Product:
    if changes.is_empty() and image is None:
        raise InvalidRequestError("No update information provided.")

    product = _owned_product(session, product_id, vendor_id)

    if changes.catalog_id is not None and changes.catalog_id != product.catalog_id:
        target = session.get(Catalog, changes.catalog_id)
        if not target:
            raise InvalidRequestError(
                "Invalid catalog_id. The specified catalog does not exist."
            )
        if target.vendor_id != vendor_id:
            raise PermissionDeniedError("Forbidden: You do not own this catalog.")
        product.catalog_id = target.id
    if changes.name is not None:
        if not changes.name.strip():
            raise InvalidRequestError("Product name cannot be empty.")
        product.name = changes.name.strip()
    if changes.description is not None:
        product.description = changes.description or None

    old_image_url = new_image_url = None
    if image is not None:
        if storage is None:
            raise RuntimeError("An image storage backend is required for uploads")
        old_image_url = product.image_url
        new_image_url = _store_image(storage, image)
        product.image_url = new_image_url

    session.add(product)
    _commit_or_discard(session, storage, new_image_url)
    session.refresh(product)

    # the new image is committed before the old one goes away
    if old_image_url and storage is not None:
        discard_image(storage, old_image_url)
    return product


def delete_product(
    session: Session,
    vendor_id: int,
    product_id: int,
    storage: Optional[ImageStorage] = None,
) -> None:
    product = _owned_product(session, product_id, vendor_id)
    image_url = product.image_url
    if image_url and storage is not None:
        discard_image(storage, image_url)
    session.delete(product)
    session.commit()
    logger.info("Vendor %s removed product %s", vendor_id, product_id)


def get_product_for_user(
    session: Session, product_id: int, user_id: int
) -> Tuple[Product, bool]:
    row = session.exec(
        select(Product, ProductLike.id)
        .outerjoin(
            ProductLike,
            and_(ProductLike.product_id == Product.id, ProductLike.user_id == user_id),
        )
        .where(Product.id == product_id)
    ).first()
    if not row:
        raise NotFoundError(f"Product with id {product_id} not found.")
    product, like_id = row
    return product, like_id is not None


def toggle_like(session: Session, user_id: int, product_id: int) -> bool:
    """Like the product, or unlike it when already liked. Returns the new state."""
    _existing_product(session, product_id)

    existing = session.exec(
        select(ProductLike).where(
            ProductLike.user_id == user_id, ProductLike.product_id == product_id
        )
    ).first()
    if existing:
        session.delete(existing)
        session.add(ProductEvent(user_id=user_id, product_id=product_id, event_type=EVENT_UNLIKED))
        liked = False
    else:
        session.add(ProductLike(user_id=user_id, product_id=product_id))
        session.add(ProductEvent(user_id=user_id, product_id=product_id, event_type=EVENT_LIKED))
        liked = True
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        stored = session.exec(
            select(ProductLike.id).where(
                ProductLike.user_id == user_id, ProductLike.product_id == product_id
            )
        ).first()
        if stored is None:
            raise ConflictError("Could not record the like for this product.") from exc
        # a concurrent request already recorded this like
        logger.info("Duplicate like ignored for product %s user %s", product_id, user_id)
        liked = True
    return liked


def request_budget(
    session: Session, user_id: int, product_id: int, message: Optional[str] = None
) -> ProductEvent:
    _existing_product(session, product_id)
    event = ProductEvent(
        user_id=user_id,
        product_id=product_id,
        event_type=EVENT_BUDGET_REQUESTED,
        message=(message or "").strip() or None,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    logger.info("Budget requested for product %s by user %s", product_id, user_id)
    return event
