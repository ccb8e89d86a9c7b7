from __future__ import annotations
"""Controller layer owning the configured object store session."""
import logging

from botocore.exceptions import BotoCoreError

from .credentials import CredentialStore, CredentialStoreError
from .models import ImageEntry, StoredCredentials
from .services import ImageStoreService

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when a remote operation is attempted without usable credentials."""


class S3GalleryController:
    """Holds credentials and a client handle for the :class:`ImageStoreService`.

    Credentials are read from the store once, on construction. Use
    :meth:`reconfigure` to apply new credentials to a running session.
    """

    def __init__(
        self,
        service: ImageStoreService | None = None,
        storage: CredentialStore | None = None,
    ):
        self._service = service or ImageStoreService()
        self._storage = storage or CredentialStore()
        self._credentials: StoredCredentials | None = None
        self._client = None
        try:
            credentials = self._storage.load()
        except CredentialStoreError:
            LOGGER.exception("Failed to load stored credentials")
            credentials = None
        if credentials is not None:
            self._configure(credentials)

    @property
    def is_configured(self) -> bool:
        return self._credentials is not None and self._client is not None

    @property
    def credentials(self) -> StoredCredentials | None:
        return self._credentials

    def reconfigure(self, credentials: StoredCredentials) -> None:
        self._credentials = None
        self._client = None
        self._configure(credentials)

    def list_images(self) -> list[ImageEntry]:
        credentials, client = self._require_configuration()
        return self._service.list_images(client=client, bucket_name=credentials.bucket_name)

    def upload_image(self, source_path: str, key: str | None = None, content_type: str | None = None) -> str:
        credentials, client = self._require_configuration()
        return self._service.upload_image(
            client=client,
            bucket_name=credentials.bucket_name,
            source_path=source_path,
            key=key,
            content_type=content_type,
        )

    def _configure(self, credentials: StoredCredentials) -> None:
        self._credentials = credentials
        if not credentials.is_complete():
            LOGGER.debug("Stored credentials are incomplete; staying unconfigured")
            return
        try:
            client = self._service.create_client(credentials)
        except (BotoCoreError, ValueError):
            LOGGER.exception("Failed to create S3 client for bucket '%s'", credentials.bucket_name)
            return
        self._client = client
        LOGGER.debug("Configured for bucket '%s' in '%s'", credentials.bucket_name, credentials.region)

    def _require_configuration(self):
        if not self.is_configured:
            raise ConfigurationError("S3 service not configured. Please provide your AWS credentials.")
        return self._credentials, self._client
