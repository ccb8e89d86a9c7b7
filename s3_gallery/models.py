from __future__ import annotations
"""Data models for stored credentials and bucket images."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg")


@dataclass
class StoredCredentials:
    """Credentials and target bucket for the gallery."""

    access_key_id: str
    secret_access_key: str
    region: str
    bucket_name: str

    def is_complete(self) -> bool:
        return all(
            [
                self.access_key_id.strip(),
                self.secret_access_key.strip(),
                self.region.strip(),
                self.bucket_name.strip(),
            ]
        )


@dataclass(frozen=True)
class ImageEntry:
    """A single image object with a time-limited signed URL."""

    key: str
    url: str
    last_modified: datetime
    size: int
    url_expires_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.key.rsplit("/", 1)[-1] or self.key

    def url_expired(self, now: datetime) -> bool:
        if self.url_expires_at is None:
            return False
        return now >= self.url_expires_at


def is_image_key(key: str) -> bool:
    return key.lower().endswith(IMAGE_EXTENSIONS)
