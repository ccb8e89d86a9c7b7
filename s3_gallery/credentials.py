from __future__ import annotations
"""Credential validation and persistence."""
import json
import logging
import os
from pathlib import Path
import tempfile

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .models import StoredCredentials

LOGGER = logging.getLogger(__name__)

STORAGE_KEY = "s3Config"
REQUIRED_FIELDS = {
    "access_key_id": "Access Key ID",
    "secret_access_key": "Secret Access Key",
    "region": "Region",
    "bucket_name": "Bucket Name",
}


class ValidationError(ValueError):
    """Raised when required credential fields are empty."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        labels = ", ".join(REQUIRED_FIELDS.get(name, name) for name in self.missing)
        super().__init__(f"Please fill in all required fields: {labels}")


class CredentialStoreError(RuntimeError):
    """Raised when the underlying storage medium fails."""


def validate_credentials(credentials: StoredCredentials) -> StoredCredentials:
    """Return a stripped copy of ``credentials`` or raise :class:`ValidationError`."""

    cleaned = StoredCredentials(
        access_key_id=credentials.access_key_id.strip(),
        secret_access_key=credentials.secret_access_key.strip(),
        region=credentials.region.strip(),
        bucket_name=credentials.bucket_name.strip(),
    )
    missing = [name for name in REQUIRED_FIELDS if not getattr(cleaned, name)]
    if missing:
        raise ValidationError(missing)
    return cleaned


class KeychainStore:
    """Encapsulates OS keychain access for the secret access key."""

    def __init__(self, service_name: str = "s3gallery"):
        self._service_name = service_name

    def get_secret(self, name: str) -> str:
        try:
            return keyring.get_password(self._service_name, name) or ""
        except KeyringError as exc:
            raise CredentialStoreError(f"Unable to read secret from keychain: {exc}") from exc

    def set_secret(self, name: str, secret: str) -> None:
        if not secret:
            self.delete_secret(name)
            return
        try:
            keyring.set_password(self._service_name, name, secret)
        except KeyringError as exc:
            raise CredentialStoreError(f"Unable to write secret to keychain: {exc}") from exc

    def delete_secret(self, name: str) -> None:
        try:
            keyring.delete_password(self._service_name, name)
        except PasswordDeleteError:
            return
        except KeyringError as exc:
            raise CredentialStoreError(f"Unable to delete secret from keychain: {exc}") from exc


class CredentialStore:
    """JSON-backed store for the single credential record.

    The secret access key is kept in the OS keychain; the remaining fields are
    written to ``storage_path`` under a fixed storage key.
    """

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3gallery_credentials.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StoredCredentials | None:
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CredentialStoreError(f"Unable to read {self._path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring unreadable credential file %s", self._path)
            return None

        record = data.get(STORAGE_KEY) if isinstance(data, dict) else None
        if not isinstance(record, dict):
            return None
        fields = [record.get(name) for name in ("accessKeyId", "region", "bucketName")]
        if not all(isinstance(value, str) for value in fields):
            LOGGER.warning("Ignoring incomplete credential record in %s", self._path)
            return None
        access_key_id, region, bucket_name = fields

        secret = record.get("secretAccessKey")
        if isinstance(secret, str) and secret:
            # Move plaintext secrets into the keychain.
            try:
                self._keychain.set_secret(STORAGE_KEY, secret)
                self._write_record(access_key_id, region, bucket_name)
            except CredentialStoreError as exc:
                LOGGER.warning("Unable to migrate plaintext secret from %s: %s", self._path, exc)
        else:
            secret = self._keychain.get_secret(STORAGE_KEY)
        return StoredCredentials(
            access_key_id=access_key_id,
            secret_access_key=secret,
            region=region,
            bucket_name=bucket_name,
        )

    def save(self, credentials: StoredCredentials) -> None:
        previous_secret = self._keychain.get_secret(STORAGE_KEY)
        self._keychain.set_secret(STORAGE_KEY, credentials.secret_access_key)
        try:
            self._write_record(credentials.access_key_id, credentials.region, credentials.bucket_name)
        except CredentialStoreError:
            self._keychain.set_secret(STORAGE_KEY, previous_secret)
            raise
        LOGGER.debug("Saved credentials for bucket '%s'", credentials.bucket_name)

    def _write_record(self, access_key_id: str, region: str, bucket_name: str) -> None:
        payload = {
            STORAGE_KEY: {
                "accessKeyId": access_key_id,
                "region": region,
                "bucketName": bucket_name,
            }
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".s3gallery-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CredentialStoreError(f"Unable to write {self._path}: {exc}") from exc
