from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    catalog_id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductWithLike(ProductRead):
    is_liked: bool = False


class ProductChanges(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    catalog_id: Optional[int] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class ImageUpload(BaseModel):
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data: bytes


class LikeResponse(BaseModel):
    liked: bool
    message: str


class BudgetRequest(BaseModel):
    message: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
