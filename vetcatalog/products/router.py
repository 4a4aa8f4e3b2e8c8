from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..db import get_session
from ..deps import CurrentUser, VendorUser, VeterinarianUser
from ..storage import ImageStorage, get_image_storage
from .schemas import (
    BudgetRequest,
    ImageUpload,
    LikeResponse,
    MessageResponse,
    ProductChanges,
    ProductRead,
    ProductWithLike,
)
from .service import (
    add_product,
    delete_product,
    get_product_for_user,
    request_budget,
    toggle_like,
    update_product,
)


def _read_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    # browsers submit an empty part when no file was picked
    if upload is None or not upload.filename:
        return None
    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type,
        data=upload.file.read(),
    )


router = APIRouter(prefix="/api/products", tags=["products"])


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_product(
    vendor: VendorUser,
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    catalog_id: Optional[int] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    storage: ImageStorage = Depends(get_image_storage),
) -> ProductRead:
    if not (name and name.strip()) or catalog_id is None:
        raise HTTPException(
            status_code=400, detail="Product name and catalog_id are required."
        )
    with get_session() as session:
        product = add_product(
            session,
            vendor.user_id,
            name=name,
            catalog_id=catalog_id,
            description=description,
            image=_read_upload(image),
            storage=storage,
        )
        return ProductRead.model_validate(product)


@router.get("/{product_id}", response_model=ProductWithLike)
def get_product(product_id: int, user: CurrentUser) -> ProductWithLike:
    with get_session() as session:
        product, liked = get_product_for_user(session, product_id, user.user_id)
        return ProductWithLike(**ProductRead.model_validate(product).model_dump(), is_liked=liked)


@router.put("/{product_id}", response_model=ProductRead)
def edit_product(
    product_id: int,
    vendor: VendorUser,
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    catalog_id: Optional[int] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    storage: ImageStorage = Depends(get_image_storage),
) -> ProductRead:
    changes = ProductChanges(name=name, description=description, catalog_id=catalog_id)
    with get_session() as session:
        product = update_product(
            session,
            vendor.user_id,
            product_id,
            changes,
            image=_read_upload(image),
            storage=storage,
        )
        return ProductRead.model_validate(product)


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_product(
    product_id: int,
    vendor: VendorUser,
    storage: ImageStorage = Depends(get_image_storage),
) -> MessageResponse:
    with get_session() as session:
        delete_product(session, vendor.user_id, product_id, storage)
    return MessageResponse(
        message=f"Product with id {product_id} and its image have been removed."
    )


@router.post("/{product_id}/like", response_model=LikeResponse)
def like_product(product_id: int, vet: VeterinarianUser) -> LikeResponse:
    with get_session() as session:
        liked = toggle_like(session, vet.user_id, product_id)
    return LikeResponse(
        liked=liked, message="Product liked." if liked else "Product unliked."
    )


@router.post("/{product_id}/request-budget", response_model=MessageResponse)
def request_product_budget(
    product_id: int,
    vet: VeterinarianUser,
    request: Optional[BudgetRequest] = None,
) -> MessageResponse:
    with get_session() as session:
        request_budget(
            session, vet.user_id, product_id, request.message if request else None
        )
    return MessageResponse(message="Budget request submitted successfully.")
