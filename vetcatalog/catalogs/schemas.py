from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..products.schemas import MessageResponse, ProductRead, ProductWithLike


class CatalogCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CatalogUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    regenerate_access_code: bool = False

    def is_empty(self) -> bool:
        return (
            self.name is None
            and self.description is None
            and not self.regenerate_access_code
        )


class CatalogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vendor_id: int
    name: str
    description: Optional[str] = None
    access_code: str
    created_at: Optional[datetime] = None


class CatalogSummary(CatalogRead):
    product_count: int = 0


class CatalogWithProducts(CatalogRead):
    products: List[ProductRead] = Field(default_factory=list)


class SharedCatalog(CatalogRead):
    vendor_name: str
    products: List[ProductWithLike] = Field(default_factory=list)


class RecentlyViewedCatalog(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    access_code: str
    vendor_name: str
    last_viewed_at: Optional[datetime] = None


class CatalogProductEvent(BaseModel):
    product_name: str
    user_name: str
    user_phone_number: Optional[str] = None
    event_type: str
    message: Optional[str] = None
    created_at: datetime


class CatalogEventsResponse(BaseModel):
    catalog: CatalogRead
    events: List[CatalogProductEvent] = Field(default_factory=list)


class ActivityItem(BaseModel):
    id: int
    source: str  # product | catalog
    type: str
    created_at: datetime
    product_name: Optional[str] = None
    catalog_name: str
    user_name: str
    user_phone_number: Optional[str] = None
    message: Optional[str] = None


class LikedProduct(BaseModel):
    product_id: int
    product_name: str
    catalog_id: int
    catalog_name: str


class ClientLikes(BaseModel):
    client_id: int
    client_name: str
    client_email: str
    client_phone_number: Optional[str] = None
    liked_products: List[LikedProduct] = Field(default_factory=list)


class TopProduct(BaseModel):
    id: int
    name: str
    likes: int


class DashboardStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_likes: int = Field(default=0, alias="totalLikes")
    top_products: List[TopProduct] = Field(default_factory=list, alias="topProducts")
