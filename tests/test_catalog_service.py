import unittest
from datetime import datetime, timezone
from unittest import mock

from sqlmodel import Session, select

from support import (
    MemoryImageStorage,
    at,
    make_catalog,
    make_product,
    make_user,
    make_vendor,
    memory_engine,
)
from vetcatalog.catalogs.service import (
    ACCESS_CODE_ALPHABET,
    create_catalog,
    delete_catalog,
    get_catalog_with_products,
    list_vendor_catalogs,
    open_shared_catalog,
    recently_viewed,
    update_catalog,
)
from vetcatalog.errors import ConflictError, InvalidRequestError, NotFoundError, PermissionDeniedError
from vetcatalog.models import (
    ROLE_VENDOR,
    ROLE_VETERINARIAN,
    Catalog,
    CatalogEvent,
    Product,
    ProductEvent,
    ProductLike,
)


class CatalogServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = memory_engine()
        self.session = Session(self.engine)
        self.vendor = make_vendor(self.session, "Acme Vendor")
        self.other_vendor = make_vendor(self.session, "Rival Vendor")
        self.vet = make_user(self.session, "Dr Vet")

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def test_create_assigns_eight_character_access_code(self) -> None:
        catalog = create_catalog(self.session, self.vendor.id, "  Dermatology ", "Skin care")
        self.assertEqual(catalog.name, "Dermatology")
        self.assertEqual(len(catalog.access_code), 8)
        self.assertTrue(all(ch in ACCESS_CODE_ALPHABET for ch in catalog.access_code))

    def test_create_requires_name(self) -> None:
        with self.assertRaises(InvalidRequestError):
            create_catalog(self.session, self.vendor.id, "   ")

    def test_update_checks_existence_then_ownership(self) -> None:
        catalog = make_catalog(self.session, self.vendor, "Mine")
        with self.assertRaises(NotFoundError):
            update_catalog(self.session, self.vendor.id, 999, name="x")
        with self.assertRaises(PermissionDeniedError):
            update_catalog(self.session, self.other_vendor.id, catalog.id, name="x")

        old_code = catalog.access_code
        updated = update_catalog(
            self.session,
            self.vendor.id,
            catalog.id,
            description="New text",
            regenerate_access_code=True,
        )
        self.assertEqual(updated.name, "Mine")
        self.assertEqual(updated.description, "New text")
        self.assertNotEqual(updated.access_code, old_code)

    def test_delete_cascades_and_discards_images(self) -> None:
        catalog = make_catalog(self.session, self.vendor, "Doomed")
        product = make_product(
            self.session, catalog, "Shampoo", image_url="https://images.test/products/a.png"
        )
        make_product(self.session, catalog, "No image")
        self.session.add(ProductLike(user_id=self.vet.id, product_id=product.id))
        self.session.add(ProductEvent(user_id=self.vet.id, product_id=product.id, event_type="liked"))
        self.session.add(CatalogEvent(user_id=self.vet.id, catalog_id=catalog.id))
        self.session.commit()

        storage = MemoryImageStorage()
        with self.assertRaises(PermissionDeniedError):
            delete_catalog(self.session, self.other_vendor.id, catalog.id, storage)
        delete_catalog(self.session, self.vendor.id, catalog.id, storage)

        self.assertEqual(storage.deleted, ["https://images.test/products/a.png"])
        self.assertEqual(self.session.exec(select(Product)).all(), [])
        self.assertEqual(self.session.exec(select(ProductLike)).all(), [])
        self.assertEqual(self.session.exec(select(ProductEvent)).all(), [])
        self.assertEqual(self.session.exec(select(CatalogEvent)).all(), [])

    def test_list_counts_products_newest_first(self) -> None:
        first = make_catalog(self.session, self.vendor, "First")
        second = make_catalog(self.session, self.vendor, "Second")
        make_catalog(self.session, self.other_vendor, "Not mine")
        make_product(self.session, first, "A")
        make_product(self.session, first, "B")

        rows = list_vendor_catalogs(self.session, self.vendor.id)
        self.assertEqual([(c.name, n) for c, n in rows], [("Second", 0), ("First", 2)])
        self.assertEqual(rows[0][0].id, second.id)

    def test_catalog_products_hidden_from_other_vendors(self) -> None:
        catalog = make_catalog(self.session, self.vendor, "Mine")
        make_product(self.session, catalog, "Zinc paste")
        make_product(self.session, catalog, "Aloe gel")

        found, products = get_catalog_with_products(self.session, self.vendor.id, catalog.id)
        self.assertEqual(found.id, catalog.id)
        self.assertEqual([p.name for p in products], ["Aloe gel", "Zinc paste"])
        with self.assertRaises(NotFoundError):
            get_catalog_with_products(self.session, self.other_vendor.id, catalog.id)

    def test_open_shared_catalog_marks_likes_and_logs_vet_views(self) -> None:
        catalog = make_catalog(self.session, self.vendor, "Shared", code="ABCD1234")
        liked = make_product(self.session, catalog, "Liked")
        make_product(self.session, catalog, "Plain")
        self.session.add(ProductLike(user_id=self.vet.id, product_id=liked.id))
        self.session.commit()

        found, vendor_name, products = open_shared_catalog(
            self.session, "abcd1234", self.vet.id, ROLE_VETERINARIAN
        )
        self.assertEqual(found.id, catalog.id)
        self.assertEqual(vendor_name, "Acme Vendor")
        self.assertEqual([(p.name, flag) for p, flag in products], [("Liked", True), ("Plain", False)])

        open_shared_catalog(self.session, "ABCD1234", self.other_vendor.id, ROLE_VENDOR)
        views = self.session.exec(select(CatalogEvent)).all()
        self.assertEqual([(v.user_id, v.event_type) for v in views], [(self.vet.id, "viewed")])

        with self.assertRaises(NotFoundError):
            open_shared_catalog(self.session, "ZZZZZZZZ", self.vet.id, ROLE_VETERINARIAN)

    def test_recently_viewed_orders_by_latest_view(self) -> None:
        older = make_catalog(self.session, self.vendor, "Older", code="OLDER001")
        newer = make_catalog(self.session, self.other_vendor, "Newer", code="NEWER001")
        self.session.add(CatalogEvent(user_id=self.vet.id, catalog_id=older.id, created_at=at(1)))
        self.session.add(CatalogEvent(user_id=self.vet.id, catalog_id=newer.id, created_at=at(2)))
        self.session.add(CatalogEvent(user_id=self.vet.id, catalog_id=older.id, created_at=at(3)))
        self.session.commit()

        rows = recently_viewed(self.session, self.vet.id)
        self.assertEqual([r["name"] for r in rows], ["Older", "Newer"])
        self.assertEqual(rows[0]["vendor_name"], "Acme Vendor")
        self.assertEqual(rows[0]["last_viewed_at"], at(3))
        self.assertEqual(rows[1]["access_code"], "NEWER001")

    def test_access_code_collision_is_retried(self) -> None:
        make_catalog(self.session, self.vendor, "Existing", code="TAKEN001")
        with mock.patch(
            "vetcatalog.catalogs.service.generate_access_code",
            side_effect=["TAKEN001", "FRESH001"],
        ):
            catalog = create_catalog(self.session, self.vendor.id, "Second")
        self.assertEqual(catalog.access_code, "FRESH001")

    def test_access_code_allocation_gives_up(self) -> None:
        make_catalog(self.session, self.vendor, "Existing", code="TAKEN001")
        with mock.patch(
            "vetcatalog.catalogs.service.generate_access_code", return_value="TAKEN001"
        ):
            with self.assertRaises(ConflictError):
                create_catalog(self.session, self.vendor.id, "Second")

    def test_timestamps_load_as_utc(self) -> None:
        catalog = create_catalog(self.session, self.vendor.id, "Stamped")
        self.session.add(
            CatalogEvent(user_id=self.vet.id, catalog_id=catalog.id, created_at=datetime(2025, 1, 2, 3, 4, 5))
        )
        self.session.commit()

        with Session(self.engine) as fresh:
            loaded = fresh.get(Catalog, catalog.id)
            self.assertEqual(loaded.created_at.tzinfo, timezone.utc)
            event = fresh.exec(select(CatalogEvent)).one()
            self.assertEqual(event.created_at, datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))


if __name__ == "__main__":
    unittest.main()
