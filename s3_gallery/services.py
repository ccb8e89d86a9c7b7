from __future__ import annotations
"""Business logic for listing, signing and uploading bucket images."""
from datetime import datetime, timedelta, timezone
import logging
import mimetypes
import os
import time
from typing import Callable

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .models import ImageEntry, StoredCredentials, is_image_key

LOGGER = logging.getLogger(__name__)

MAX_KEYS = 1000
SIGNED_URL_EXPIRY = 3600
UPLOAD_PREFIX = "uploads/"


class RemoteError(RuntimeError):
    """Raised when a remote call fails or returns malformed data."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


def build_upload_key(filename: str, now_ms: int | None = None) -> str:
    """Return the default key for an uploaded file."""

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{UPLOAD_PREFIX}{now_ms}-{os.path.basename(filename)}"


class ImageStoreService:
    """Encapsulates S3 calls independent of any UI technology."""

    def __init__(self, client_factory: Callable[..., object] | None = None):
        self._client_factory = client_factory or boto3.client

    def create_client(self, credentials: StoredCredentials):
        config = Config(signature_version="s3v4")
        return self._client_factory(
            "s3",
            region_name=credentials.region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            config=config,
        )

    def list_images(self, *, client, bucket_name: str, now: datetime | None = None) -> list[ImageEntry]:
        """Return signed image entries for the bucket, newest first.

        Only the first page of up to ``MAX_KEYS`` objects is considered.

        Raises:
            RemoteError: when listing or signing fails, or an object is malformed.
        """
        try:
            response = client.list_objects_v2(Bucket=bucket_name, MaxKeys=MAX_KEYS)
        except (ClientError, BotoCoreError, OSError) as exc:
            raise RemoteError(f"Failed to fetch images: {exc}", exc) from exc

        contents = (response.get("Contents") or [])[:MAX_KEYS]
        for obj in contents:
            if not obj.get("Key"):
                raise RemoteError("Failed to fetch images: Invalid object data")
        image_objects = [obj for obj in contents if is_image_key(obj["Key"])]
        LOGGER.debug(
            "Bucket '%s' returned %d object(s), %d image(s)",
            bucket_name,
            len(contents),
            len(image_objects),
        )

        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=SIGNED_URL_EXPIRY)
        entries: list[ImageEntry] = []
        for obj in image_objects:
            last_modified = obj.get("LastModified")
            size = obj.get("Size")
            if last_modified is None or size is None:
                raise RemoteError(f"Failed to fetch images: Invalid object data for '{obj['Key']}'")
            try:
                url = client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": bucket_name, "Key": obj["Key"]},
                    ExpiresIn=SIGNED_URL_EXPIRY,
                )
            except (ClientError, BotoCoreError) as exc:
                raise RemoteError(f"Failed to fetch images: {exc}", exc) from exc
            entries.append(
                ImageEntry(
                    key=obj["Key"],
                    url=url,
                    last_modified=last_modified,
                    size=int(size),
                    url_expires_at=expires_at,
                )
            )

        entries.sort(key=lambda entry: entry.last_modified, reverse=True)
        return entries

    def upload_image(
        self,
        *,
        client,
        bucket_name: str,
        source_path: str,
        key: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Upload a local image and return the key it was stored under."""

        upload_key = key or build_upload_key(source_path)
        if not content_type:
            content_type = mimetypes.guess_type(source_path)[0] or "application/octet-stream"
        try:
            client.upload_file(
                source_path,
                bucket_name,
                upload_key,
                ExtraArgs={"ContentType": content_type, "ACL": "private"},
            )
        except (ClientError, BotoCoreError, OSError) as exc:
            raise RemoteError(f"Failed to upload image: {exc}", exc) from exc
        LOGGER.debug("Uploaded '%s' to '%s/%s'", source_path, bucket_name, upload_key)
        return upload_key
