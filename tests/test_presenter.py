import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from s3_gallery.controller import ConfigurationError
from s3_gallery.credentials import ValidationError
from s3_gallery.gallery import GalleryState
from s3_gallery.models import ImageEntry, StoredCredentials
from s3_gallery.presenter import S3GalleryPresenter
from s3_gallery.services import RemoteError
from s3_gallery.settings import AppSettings, SettingsStorage


def _entry(key):
    return ImageEntry(
        key=key,
        url=f"https://signed.example/{key}",
        last_modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
        size=10,
    )


class FakeController:
    def __init__(self):
        self.is_configured = True
        self.credentials = None
        self.reconfigured = []
        self.list_results = []
        self.upload_calls = []
        self.upload_error = None

    def reconfigure(self, credentials):
        self.reconfigured.append(credentials)
        self.credentials = credentials

    def list_images(self):
        result = self.list_results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def upload_image(self, source_path, key=None):
        self.upload_calls.append((source_path, key))
        if self.upload_error:
            raise self.upload_error
        return key or "uploads/1-a.png"


class FakeCredentialStore:
    def __init__(self):
        self.saved = []

    def save(self, credentials):
        self.saved.append(credentials)


class DeferredRunner:
    def __init__(self):
        self.tasks = []

    def __call__(self, task):
        self.tasks.append(task)


class S3GalleryPresenterTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.controller = FakeController()
        self.store = FakeCredentialStore()
        self.runner = DeferredRunner()
        self.fetched = []
        self.saved_files = []
        self.presenter = S3GalleryPresenter(
            controller=self.controller,
            credential_storage=self.store,
            settings_storage=SettingsStorage(Path(self._tmp.name) / "settings.json"),
            run=self.runner,
            fetcher=self._fetch,
            saver=lambda url, destination: self.saved_files.append((url, destination)),
        )

    def _fetch(self, url):
        self.fetched.append(url)
        if url.endswith("broken.png"):
            raise OSError("connection reset")
        return b"image-bytes"

    def _run_all(self):
        while self.runner.tasks:
            self.runner.tasks.pop(0)()

    def test_save_credentials_rejects_empty_bucket(self):
        credentials = StoredCredentials("AKIA", "secret", "us-east-1", "")

        with self.assertRaises(ValidationError):
            self.presenter.save_credentials(credentials)

        self.assertEqual([], self.store.saved)
        self.assertEqual([], self.controller.reconfigured)

    def test_save_credentials_persists_and_reconfigures(self):
        credentials = StoredCredentials(" AKIA ", "secret", "us-east-1", "bucket-one ")

        saved = self.presenter.save_credentials(credentials)

        expected = StoredCredentials("AKIA", "secret", "us-east-1", "bucket-one")
        self.assertEqual(expected, saved)
        self.assertEqual([expected], self.store.saved)
        self.assertEqual([expected], self.controller.reconfigured)

    def test_load_images_delivers_entries(self):
        entries = [_entry("a.png")]
        self.controller.list_results = [entries]
        results = []
        done = []

        self.presenter.load_images(on_success=results.append, on_error=self.fail, on_done=lambda: done.append(True))
        self._run_all()

        self.assertEqual([entries], results)
        self.assertEqual([True], done)

    def test_load_images_reports_error_message(self):
        self.controller.list_results = [RemoteError("Failed to fetch images: Denied")]
        errors = []

        self.presenter.load_images(on_success=self.fail, on_error=errors.append)
        self._run_all()

        self.assertEqual(["Failed to fetch images: Denied"], errors)

    def test_load_images_reports_configuration_error(self):
        self.controller.list_results = [ConfigurationError("S3 service not configured")]
        errors = []

        self.presenter.load_images(on_success=self.fail, on_error=errors.append)
        self._run_all()

        self.assertEqual(["S3 service not configured"], errors)

    def test_stale_listing_is_discarded(self):
        old_entries = [_entry("old.png")]
        new_entries = [_entry("new.png")]
        self.controller.list_results = [new_entries, old_entries]
        results = []
        done = []

        first = self.presenter.load_images(on_success=results.append, on_error=self.fail, on_done=lambda: done.append(1))
        second = self.presenter.load_images(
            refresh=True,
            on_success=results.append,
            on_error=self.fail,
            on_done=lambda: done.append(2),
        )
        slow_initial_load = self.runner.tasks.pop(0)
        fast_refresh = self.runner.tasks.pop(0)
        fast_refresh()
        slow_initial_load()

        self.assertLess(first, second)
        self.assertEqual(second, self.presenter.latest_request)
        self.assertEqual([new_entries], results)
        self.assertEqual([2], done)

    def test_completed_listing_is_delivered_before_next_request(self):
        self.controller.list_results = [[_entry("a.png")], [_entry("b.png")]]
        results = []

        self.presenter.load_images(on_success=results.append, on_error=self.fail)
        self._run_all()
        self.presenter.load_images(refresh=True, on_success=results.append, on_error=self.fail)
        self._run_all()

        self.assertEqual(["a.png", "b.png"], [batch[0].key for batch in results])

    def test_upload_image_reports_key(self):
        keys = []

        self.presenter.upload_image(source_path="/tmp/a.png", on_success=keys.append, on_error=self.fail)
        self._run_all()

        self.assertEqual(["uploads/1-a.png"], keys)
        self.assertEqual([("/tmp/a.png", None)], self.controller.upload_calls)

    def test_upload_image_reports_error(self):
        self.controller.upload_error = RemoteError("Failed to upload image: Denied")
        errors = []

        self.presenter.upload_image(source_path="/tmp/a.png", on_success=self.fail, on_error=errors.append)
        self._run_all()

        self.assertEqual(["Failed to upload image: Denied"], errors)

    def test_fetch_image_uses_signed_url(self):
        data = []
        errors = []

        self.presenter.fetch_image(_entry("a.png"), on_success=data.append, on_error=self.fail)
        self.presenter.fetch_image(_entry("broken.png"), on_success=self.fail, on_error=errors.append)
        self._run_all()

        self.assertEqual([b"image-bytes"], data)
        self.assertEqual(["connection reset"], errors)
        self.assertEqual(
            ["https://signed.example/a.png", "https://signed.example/broken.png"],
            self.fetched,
        )

    def test_download_image_saves_signed_url(self):
        done = []

        self.presenter.download_image(
            _entry("photos/a.png"),
            destination="/tmp/a.png",
            on_success=lambda: done.append("ok"),
            on_error=self.fail,
        )
        self._run_all()

        self.assertEqual(["ok"], done)
        self.assertEqual([("https://signed.example/photos/a.png", "/tmp/a.png")], self.saved_files)

    def test_save_settings_persists(self):
        self.presenter.save_settings(AppSettings(refresh_interval_seconds=45))

        self.assertEqual(45, self.presenter.settings.refresh_interval_seconds)
        reloaded = SettingsStorage(Path(self._tmp.name) / "settings.json").load()
        self.assertEqual(45, reloaded.refresh_interval_seconds)


class GalleryListingFlowTests(unittest.TestCase):
    """Drives GalleryState through the presenter the way the window does."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.controller = FakeController()
        self.runner = DeferredRunner()
        self.presenter = S3GalleryPresenter(
            controller=self.controller,
            credential_storage=FakeCredentialStore(),
            settings_storage=SettingsStorage(Path(self._tmp.name) / "settings.json"),
            run=self.runner,
        )
        self.state = GalleryState()
        self.notices = []

    def _fetch(self, *, refresh):
        refresh = self.state.begin(refresh=refresh)
        self.presenter.load_images(
            refresh=refresh,
            on_success=self.state.apply_success,
            on_error=lambda message: self._handle_error(message, refresh),
            on_done=self.state.finish,
        )

    def _handle_error(self, message, refresh):
        transient = self.state.apply_failure(message, refresh=refresh)
        if transient:
            self.notices.append(transient)

    def _auto_refresh(self):
        if self.state.accepts_auto_refresh:
            self._fetch(refresh=True)

    def test_failed_refresh_superseding_initial_load_shows_error(self):
        self.controller.list_results = [
            RemoteError("Failed to fetch images: Denied"),
            RemoteError("Failed to fetch images: Denied"),
        ]

        self._fetch(refresh=False)
        self._fetch(refresh=True)
        while self.runner.tasks:
            self.runner.tasks.pop(0)()

        self.assertEqual("Failed to fetch images: Denied", self.state.error)
        self.assertFalse(self.state.is_empty)
        self.assertFalse(self.state.busy)
        self.assertEqual([], self.notices)

    def test_auto_refresh_waits_for_slow_listing(self):
        self.controller.list_results = [[_entry("a.png")], [_entry("b.png")]]

        self._fetch(refresh=False)
        for _ in range(3):
            self._auto_refresh()
        self.assertEqual(1, len(self.runner.tasks))
        self.runner.tasks.pop(0)()

        self.assertFalse(self.state.busy)
        self.assertEqual(["a.png"], [entry.key for entry in self.state.entries])

        self._auto_refresh()
        self.assertTrue(self.state.refreshing)
        self.runner.tasks.pop(0)()
        self.assertFalse(self.state.busy)
        self.assertEqual(["b.png"], [entry.key for entry in self.state.entries])


if __name__ == "__main__":
    unittest.main()
