from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..db import get_session
from ..deps import CurrentUser, VendorUser, VeterinarianUser
from ..products.schemas import ProductRead, ProductWithLike
from ..storage import ImageStorage, get_image_storage
from . import analytics
from .schemas import (
    ActivityItem,
    CatalogCreate,
    CatalogEventsResponse,
    CatalogRead,
    CatalogSummary,
    CatalogUpdate,
    CatalogWithProducts,
    ClientLikes,
    DashboardStats,
    MessageResponse,
    RecentlyViewedCatalog,
    SharedCatalog,
)
from .service import (
    create_catalog,
    delete_catalog,
    get_catalog_with_products,
    list_vendor_catalogs,
    open_shared_catalog,
    recently_viewed,
    update_catalog,
)

router = APIRouter(prefix="/api/catalogs", tags=["catalogs"])


@router.post("", response_model=CatalogRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=CatalogRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_vendor_catalog(request: CatalogCreate, vendor: VendorUser) -> CatalogRead:
    if not (request.name and request.name.strip()):
        raise HTTPException(status_code=400, detail="Catalog name is required.")
    with get_session() as session:
        catalog = create_catalog(session, vendor.user_id, request.name, request.description)
        return CatalogRead.model_validate(catalog)


@router.get("/my-catalogs", response_model=List[CatalogSummary])
def my_catalogs(vendor: VendorUser) -> List[CatalogSummary]:
    with get_session() as session:
        return [
            CatalogSummary(
                **CatalogRead.model_validate(catalog).model_dump(),
                product_count=count,
            )
            for catalog, count in list_vendor_catalogs(session, vendor.user_id)
        ]


@router.get("/events", response_model=List[ActivityItem])
def dashboard_activity(
    vendor: VendorUser,
    limit: int = Query(analytics.ACTIVITY_FEED_LIMIT, ge=1, le=50),
) -> List[ActivityItem]:
    with get_session() as session:
        rows = analytics.activity_feed(session, vendor.user_id, limit=limit)
    return [ActivityItem(**row) for row in rows]


@router.get("/recently-viewed", response_model=List[RecentlyViewedCatalog])
def recently_viewed_catalogs(vet: VeterinarianUser) -> List[RecentlyViewedCatalog]:
    with get_session() as session:
        rows = recently_viewed(session, vet.user_id)
    return [RecentlyViewedCatalog(**row) for row in rows]


@router.get("/clients", response_model=List[ClientLikes])
def clients(vendor: VendorUser) -> List[ClientLikes]:
    with get_session() as session:
        rows = analytics.clients_with_likes(session, vendor.user_id)
    return [ClientLikes(**row) for row in rows]


@router.get("/dashboard-stats", response_model=DashboardStats)
def dashboard_stats(vendor: VendorUser) -> DashboardStats:
    with get_session() as session:
        stats = analytics.dashboard_stats(session, vendor.user_id)
    return DashboardStats(**stats)


@router.get("/view/{access_code}", response_model=SharedCatalog)
def view_shared_catalog(access_code: str, user: CurrentUser) -> SharedCatalog:
    with get_session() as session:
        catalog, vendor_name, products = open_shared_catalog(
            session, access_code, user.user_id, user.role
        )
        return SharedCatalog(
            **CatalogRead.model_validate(catalog).model_dump(),
            vendor_name=vendor_name,
            products=[
                ProductWithLike(
                    **ProductRead.model_validate(product).model_dump(), is_liked=liked
                )
                for product, liked in products
            ],
        )


@router.put("/{catalog_id}", response_model=CatalogRead)
def edit_catalog(catalog_id: int, request: CatalogUpdate, vendor: VendorUser) -> CatalogRead:
    if request.is_empty():
        raise HTTPException(status_code=400, detail="No update information provided.")
    with get_session() as session:
        catalog = update_catalog(
            session,
            vendor.user_id,
            catalog_id,
            name=request.name,
            description=request.description,
            regenerate_access_code=request.regenerate_access_code,
        )
        return CatalogRead.model_validate(catalog)


@router.delete("/{catalog_id}", response_model=MessageResponse)
def remove_catalog(
    catalog_id: int,
    vendor: VendorUser,
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    with get_session() as session:
        delete_catalog(session, vendor.user_id, catalog_id, storage)
    return MessageResponse(message=f"Catalog with id {catalog_id} has been deleted.")


@router.get("/{catalog_id}/products", response_model=CatalogWithProducts)
def catalog_products(catalog_id: int, vendor: VendorUser) -> CatalogWithProducts:
    with get_session() as session:
        catalog, products = get_catalog_with_products(session, vendor.user_id, catalog_id)
        return CatalogWithProducts(
            **CatalogRead.model_validate(catalog).model_dump(),
            products=[ProductRead.model_validate(product) for product in products],
        )


@router.get("/{catalog_id}/events", response_model=CatalogEventsResponse)
def catalog_event_history(catalog_id: int, vendor: VendorUser) -> CatalogEventsResponse:
    with get_session() as session:
        catalog, events = analytics.catalog_events(session, vendor.user_id, catalog_id)
        return CatalogEventsResponse(
            catalog=CatalogRead.model_validate(catalog), events=events
        )
