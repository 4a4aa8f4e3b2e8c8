"""
Engagement rollups shown on the vendor dashboard.

All queries are scoped to catalogs owned by one vendor.
"""

from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func, literal, null, union_all
from sqlmodel import Session, select

from ..models import Catalog, CatalogEvent, Product, ProductEvent, ProductLike, User
from .service import get_visible_catalog

ACTIVITY_FEED_LIMIT = 5
TOP_PRODUCTS_LIMIT = 5


def catalog_events(session: Session, vendor_id: int, catalog_id: int):
    """Product events of one owned catalog, newest first."""
    catalog = get_visible_catalog(session, catalog_id, vendor_id)
    rows = session.exec(
        select(
            Product.name.label("product_name"),
            User.name.label("user_name"),
            User.phone_number.label("user_phone_number"),
            ProductEvent.event_type,
            ProductEvent.message,
            ProductEvent.created_at,
        )
        .select_from(ProductEvent)
        .join(Product, ProductEvent.product_id == Product.id)
        .join(User, ProductEvent.user_id == User.id)
        .where(Product.catalog_id == catalog.id)
        .order_by(ProductEvent.created_at.desc(), ProductEvent.id.desc())
    ).all()
    return catalog, [dict(row._mapping) for row in rows]


def activity_feed(session: Session, vendor_id: int, limit: int = ACTIVITY_FEED_LIMIT) -> List[dict]:
    """Most recent product and catalog events across the vendor's catalogs."""
    product_events = (
        select(
            ProductEvent.id.label("id"),
            literal("product").label("source"),
            ProductEvent.event_type.label("type"),
            ProductEvent.created_at.label("created_at"),
            Product.name.label("product_name"),
            Catalog.name.label("catalog_name"),
            User.name.label("user_name"),
            User.phone_number.label("user_phone_number"),
            ProductEvent.message.label("message"),
        )
        .join(Product, ProductEvent.product_id == Product.id)
        .join(Catalog, Product.catalog_id == Catalog.id)
        .join(User, ProductEvent.user_id == User.id)
        .where(Catalog.vendor_id == vendor_id)
    )
    catalog_views = (
        select(
            CatalogEvent.id.label("id"),
            literal("catalog").label("source"),
            CatalogEvent.event_type.label("type"),
            CatalogEvent.created_at.label("created_at"),
            null().label("product_name"),
            Catalog.name.label("catalog_name"),
            User.name.label("user_name"),
            User.phone_number.label("user_phone_number"),
            null().label("message"),
        )
        .join(Catalog, CatalogEvent.catalog_id == Catalog.id)
        .join(User, CatalogEvent.user_id == User.id)
        .where(Catalog.vendor_id == vendor_id)
    )
    events = union_all(product_events, catalog_views).subquery("events")
    rows = session.exec(
        select(*events.c)
        .order_by(events.c.created_at.desc(), events.c.id.desc())
        .limit(limit)
    ).all()
    return [dict(row._mapping) for row in rows]


def clients_with_likes(session: Session, vendor_id: int) -> List[dict]:
    """Group the vendor's liked products by the client who liked them."""
    rows = session.exec(
        select(
            User.id.label("client_id"),
            User.name.label("client_name"),
            User.email.label("client_email"),
            User.phone_number.label("client_phone_number"),
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            Catalog.id.label("catalog_id"),
            Catalog.name.label("catalog_name"),
        )
        .select_from(ProductLike)
        .join(User, ProductLike.user_id == User.id)
        .join(Product, ProductLike.product_id == Product.id)
        .join(Catalog, Product.catalog_id == Catalog.id)
        .where(Catalog.vendor_id == vendor_id)
        .order_by(User.name, User.id, Product.id)
    ).all()

    clients: Dict[int, dict] = {}
    for row in rows:
        client = clients.get(row.client_id)
        if client is None:
            client = clients[row.client_id] = {
                "client_id": row.client_id,
                "client_name": row.client_name,
                "client_email": row.client_email,
                "client_phone_number": row.client_phone_number,
                "liked_products": [],
            }
        client["liked_products"].append(
            {
                "product_id": row.product_id,
                "product_name": row.product_name,
                "catalog_id": row.catalog_id,
                "catalog_name": row.catalog_name,
            }
        )
    return list(clients.values())


def dashboard_stats(session: Session, vendor_id: int, limit: int = TOP_PRODUCTS_LIMIT) -> dict:
    total_likes = session.exec(
        select(func.count(ProductLike.id))
        .select_from(ProductLike)
        .join(Product, ProductLike.product_id == Product.id)
        .join(Catalog, Product.catalog_id == Catalog.id)
        .where(Catalog.vendor_id == vendor_id)
    ).one()

    likes = func.count(ProductLike.id).label("likes")
    top = session.exec(
        select(Product.id, Product.name, likes)
        .join(Catalog, Product.catalog_id == Catalog.id)
        .outerjoin(ProductLike, ProductLike.product_id == Product.id)
        .where(Catalog.vendor_id == vendor_id)
        .group_by(Product.id, Product.name)
        # products nobody liked are left out
        .having(func.count(ProductLike.id) > 0)
        .order_by(likes.desc(), Product.id)
        .limit(limit)
    ).all()
    return {
        "total_likes": total_likes or 0,
        "top_products": [
            {"id": row.id, "name": row.name, "likes": row.likes} for row in top
        ],
    }
