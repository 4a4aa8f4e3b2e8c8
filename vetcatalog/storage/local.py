from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .base import ImageStorage

logger = logging.getLogger(__name__)


class LocalImageStorage(ImageStorage):
    name = "local"

    def __init__(self, root: str, base_url: str = "/media") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Object key escapes media root: {key}")
        return path

    def save(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Stored %d bytes at %s", len(data), path)
        return f"{self.base_url}/{key}"

    def key_for_url(self, url: str) -> Optional[str]:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    def delete(self, url: str) -> None:
        key = self.key_for_url(url)
        if not key:
            logger.warning("Not a local media URL, skipping delete: %s", url)
            return
        self._path(key).unlink(missing_ok=True)
