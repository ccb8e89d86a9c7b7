from __future__ import annotations
"""View-agnostic presenter that wraps controller operations."""
from dataclasses import replace
import itertools
import logging
import shutil
import threading
from typing import Callable
import urllib.request

from .controller import ConfigurationError, S3GalleryController
from .credentials import CredentialStore, validate_credentials
from .models import ImageEntry, StoredCredentials
from .services import RemoteError
from .settings import AppSettings, SettingsStorage


DispatchFn = Callable[[Callable[[], None]], None]
RunFn = Callable[[Callable[[], None]], None]
ErrorFn = Callable[[str], None]
DoneFn = Callable[[], None]

LOGGER = logging.getLogger(__name__)

FETCH_TIMEOUT = 30


def _format_error(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def _run_in_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


def fetch_url(url: str, timeout: int = FETCH_TIMEOUT) -> bytes:
    with urllib.request.urlopen(url, timeout=timeout) as response:
        return response.read()


def save_url(url: str, destination: str, timeout: int = FETCH_TIMEOUT) -> None:
    with urllib.request.urlopen(url, timeout=timeout) as response, open(destination, "wb") as handle:
        shutil.copyfileobj(response, handle)


class S3GalleryPresenter:
    """Runs background operations and returns results via callbacks.

    Listing requests are numbered; a result is delivered only if no newer
    listing was requested while it was in flight.
    """

    def __init__(
        self,
        *,
        controller: S3GalleryController | None = None,
        credential_storage: CredentialStore | None = None,
        settings_storage: SettingsStorage | None = None,
        dispatch: DispatchFn | None = None,
        run: RunFn | None = None,
        fetcher: Callable[[str], bytes] | None = None,
        saver: Callable[[str, str], None] | None = None,
    ) -> None:
        self._credential_storage = credential_storage or CredentialStore()
        self._controller = controller or S3GalleryController(storage=self._credential_storage)
        self._settings_storage = settings_storage or SettingsStorage()
        self._settings = self._settings_storage.load()
        self._dispatch = dispatch or (lambda func: func())
        self._run = run or _run_in_thread
        self._fetch = fetcher or fetch_url
        self._save = saver or save_url
        self._request_counter = itertools.count(1)
        self._latest_request = 0
        self._lock = threading.Lock()

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings)

    @property
    def is_configured(self) -> bool:
        return self._controller.is_configured

    @property
    def credentials(self) -> StoredCredentials | None:
        return self._controller.credentials

    @property
    def latest_request(self) -> int:
        return self._latest_request

    def save_settings(self, settings: AppSettings) -> None:
        self._settings = settings
        self._settings_storage.save(settings)

    def save_credentials(self, credentials: StoredCredentials) -> StoredCredentials:
        """Validate, persist and apply credentials.

        Raises:
            ValidationError: when a required field is empty; nothing is saved.
            CredentialStoreError: when the record cannot be persisted.
        """
        cleaned = validate_credentials(credentials)
        self._credential_storage.save(cleaned)
        self._controller.reconfigure(cleaned)
        LOGGER.debug("Credentials saved for bucket '%s'", cleaned.bucket_name)
        return cleaned

    def load_images(
        self,
        *,
        refresh: bool = False,
        on_success: Callable[[list[ImageEntry]], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> int:
        with self._lock:
            request_id = next(self._request_counter)
            self._latest_request = request_id
        LOGGER.debug("Listing images (request %d, refresh=%s)", request_id, refresh)

        def is_current() -> bool:
            with self._lock:
                return request_id == self._latest_request

        def deliver(func: Callable[[], None]) -> None:
            def guarded() -> None:
                if not is_current():
                    LOGGER.debug("Discarding stale listing result for request %d", request_id)
                    return
                func()

            self._dispatch(guarded)

        def task() -> None:
            try:
                entries = self._controller.list_images()
            except (ConfigurationError, RemoteError) as exc:
                message = _format_error(exc)
                LOGGER.exception("Image listing failed (request %d)", request_id)
                deliver(lambda: on_error(message))
            except Exception as exc:
                message = _format_error(exc)
                LOGGER.exception("Unexpected image listing error (request %d)", request_id)
                deliver(lambda: on_error(message))
            else:
                LOGGER.debug("Request %d listed %d image(s)", request_id, len(entries))
                deliver(lambda: on_success(entries))
            finally:
                if on_done:
                    deliver(on_done)

        self._run(task)
        return request_id

    def upload_image(
        self,
        *,
        source_path: str,
        key: str | None = None,
        on_success: Callable[[str], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        LOGGER.debug("Uploading '%s'", source_path)

        def task() -> None:
            try:
                uploaded_key = self._controller.upload_image(source_path, key)
            except (ConfigurationError, RemoteError) as exc:
                message = _format_error(exc)
                LOGGER.exception("Upload failed for '%s'", source_path)
                self._dispatch(lambda: on_error(message))
            except Exception as exc:
                message = _format_error(exc)
                LOGGER.exception("Unexpected upload error for '%s'", source_path)
                self._dispatch(lambda: on_error(message))
            else:
                self._dispatch(lambda: on_success(uploaded_key))
            finally:
                if on_done:
                    self._dispatch(on_done)

        self._run(task)

    def fetch_image(
        self,
        entry: ImageEntry,
        *,
        on_success: Callable[[bytes], None],
        on_error: ErrorFn,
    ) -> None:
        def task() -> None:
            try:
                data = self._fetch(entry.url)
            except Exception as exc:
                message = _format_error(exc)
                LOGGER.debug("Unable to fetch image '%s': %s", entry.key, exc)
                self._dispatch(lambda: on_error(message))
            else:
                self._dispatch(lambda: on_success(data))

        self._run(task)

    def download_image(
        self,
        entry: ImageEntry,
        *,
        destination: str,
        on_success: DoneFn | None = None,
        on_error: ErrorFn | None = None,
        on_done: DoneFn | None = None,
    ) -> None:
        LOGGER.debug("Downloading '%s' to '%s'", entry.key, destination)

        def task() -> None:
            try:
                self._save(entry.url, destination)
            except Exception as exc:
                message = _format_error(exc)
                LOGGER.exception("Download failed for '%s'", entry.key)
                if on_error:
                    self._dispatch(lambda: on_error(message))
            else:
                if on_success:
                    self._dispatch(on_success)
            finally:
                if on_done:
                    self._dispatch(on_done)

        self._run(task)
