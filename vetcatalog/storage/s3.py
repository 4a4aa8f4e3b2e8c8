from __future__ import annotations

import logging
from typing import Any, Optional

from .base import ImageStorage

logger = logging.getLogger(__name__)


class S3ImageStorage(ImageStorage):
    """Stores images in an S3-compatible bucket through boto3."""

    name = "s3"

    def __init__(
        self,
        bucket: str,
        *,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.client = client or self._build_client(region, endpoint_url)
        if public_url:
            self.public_url = public_url.rstrip("/")
        elif endpoint_url:
            self.public_url = f"{endpoint_url.rstrip('/')}/{bucket}"
        else:
            self.public_url = f"https://{bucket}.s3.amazonaws.com"

    @staticmethod
    def _build_client(region: Optional[str], endpoint_url: Optional[str]):
        import boto3
        from botocore.config import Config

        kwargs: dict = {
            "config": Config(
                connect_timeout=5,
                read_timeout=60,
                retries={"max_attempts": 3, "mode": "standard"},
            )
        }
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        return boto3.client("s3", **kwargs)

    def save(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        logger.info("Uploaded s3://%s/%s (%d bytes)", self.bucket, key, len(data))
        return f"{self.public_url}/{key}"

    def key_for_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    def delete(self, url: str) -> None:
        key = self.key_for_url(url)
        if not key:
            logger.warning("URL is outside bucket %s, skipping delete: %s", self.bucket, url)
            return
        self.client.delete_object(Bucket=self.bucket, Key=key)
