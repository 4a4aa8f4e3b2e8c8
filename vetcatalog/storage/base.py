from __future__ import annotations

import os
import random
import time
from abc import ABC, abstractmethod
from typing import Optional


def build_object_key(field_name: str, original_filename: Optional[str], folder: str = "products") -> str:
    """Return ``<folder>/<field>-<millis>-<random><ext>`` for an uploaded file."""
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    ext = os.path.splitext(original_filename or "")[1].lower()
    return f"{folder}/{field_name}-{unique_suffix}{ext}"


class ImageStorage(ABC):
    """Abstract destination for uploaded product images."""

    name: str

    @abstractmethod
    def save(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Persist ``data`` under ``key`` and return its public URL."""

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove the object previously returned by :meth:`save`."""

    @abstractmethod
    def key_for_url(self, url: str) -> Optional[str]:
        """Map a public URL back to its object key, or ``None`` if foreign."""
