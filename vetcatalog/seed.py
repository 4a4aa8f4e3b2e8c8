from __future__ import annotations

import argparse
import logging
import os

from sqlmodel import Session, select

from .auth.service import register_user
from .catalogs.service import create_catalog
from .db import configure_engine, create_db_and_tables, get_session
from .models import ROLE_VENDOR, ROLE_VETERINARIAN, Catalog, Product, User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo1234"

SEED_USERS = [
    dict(
        name="Vendor Demo",
        email="vendor@example.com",
        phone_number="+55 11 90000-0001",
        role=ROLE_VENDOR,
    ),
    dict(
        name="Dra. Vet Demo",
        email="vet@example.com",
        phone_number="+55 11 90000-0002",
        role=ROLE_VETERINARIAN,
    ),
]

SEED_CATALOG = dict(
    name="Linha Pet Essentials",
    description="Nutrition and dermatology line for small animal clinics.",
)

SEED_PRODUCTS = [
    dict(name="Hypoallergenic Diet 10kg", description="Hydrolysed protein for food-responsive dermatitis."),
    dict(name="Chlorhexidine Shampoo", description="2% antiseptic shampoo, 500 ml."),
    dict(name="Omega-3 Capsules", description="EPA/DHA supplement for skin and joints."),
]


def seed_demo_data(session: Session) -> None:
    """Ensure the demo vendor, veterinarian and catalog exist."""

    force_env = os.getenv("FORCE_SEED")
    force = str(force_env).lower() in {"1", "true", "yes"}

    users = {}
    for item in SEED_USERS:
        user = session.exec(select(User).where(User.email == item["email"])).first()
        if user is None:
            user = register_user(session, password=DEMO_PASSWORD, **item)
        users[item["role"]] = user

    vendor = users[ROLE_VENDOR]
    catalog = session.exec(
        select(Catalog).where(
            Catalog.vendor_id == vendor.id, Catalog.name == SEED_CATALOG["name"]
        )
    ).first()
    if catalog and not force:
        return
    if catalog and force:
        session.delete(catalog)
        session.commit()

    catalog = create_catalog(session, vendor.id, **SEED_CATALOG)
    for item in SEED_PRODUCTS:
        session.add(Product(catalog_id=catalog.id, **item))
    session.commit()
    logger.info("Seeded catalog %s with access code %s", catalog.id, catalog.access_code)


def main() -> None:
    parser = argparse.ArgumentParser(description="Load demo users and a sample catalog")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.database_url:
        configure_engine(args.database_url)
    create_db_and_tables()
    with get_session() as session:
        seed_demo_data(session)


if __name__ == "__main__":
    main()
