from __future__ import annotations

import logging
from typing import Optional

from ..settings import Settings, get_settings
from .base import ImageStorage, build_object_key
from .local import LocalImageStorage
from .s3 import S3ImageStorage

logger = logging.getLogger(__name__)

_STORAGE: Optional[ImageStorage] = None


def build_image_storage(settings: Settings) -> ImageStorage:
    backend = settings.storage_backend
    if backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("STORAGE_BACKEND=s3 requires S3_BUCKET")
        return S3ImageStorage(
            settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            public_url=settings.s3_public_url,
        )
    if backend != "local":
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {backend}")
    return LocalImageStorage(settings.media_root, settings.media_url)


def get_image_storage() -> ImageStorage:
    global _STORAGE
    if _STORAGE is None:
        _STORAGE = build_image_storage(get_settings())
        logger.info("Image storage backend: %s", _STORAGE.name)
    return _STORAGE


def set_image_storage(storage: Optional[ImageStorage]) -> None:
    global _STORAGE
    _STORAGE = storage


__all__ = [
    "ImageStorage",
    "LocalImageStorage",
    "S3ImageStorage",
    "build_image_storage",
    "build_object_key",
    "get_image_storage",
    "set_image_storage",
]
