import json
import tempfile
import unittest
from pathlib import Path

from s3_gallery.settings import AppSettings, SettingsStorage


class SettingsStorageTests(unittest.TestCase):
    def test_load_returns_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            storage = SettingsStorage(path)

            settings = storage.load()

            self.assertEqual(AppSettings(), settings)
            self.assertEqual(30, settings.refresh_interval_seconds)

    def test_load_sanitizes_invalid_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            payload = {
                "refresh_interval_seconds": "nope",
                "thumbnail_size": 2,
                "default_region": "   ",
                "log_level": "LOUD",
            }
            path.write_text(json.dumps(payload), encoding="utf-8")
            storage = SettingsStorage(path)

            settings = storage.load()

            self.assertEqual(AppSettings(), settings)

    def test_load_reads_valid_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            payload = {
                "refresh_interval_seconds": 60,
                "thumbnail_size": 256,
                "default_region": "eu-west-1",
                "log_level": "debug",
            }
            path.write_text(json.dumps(payload), encoding="utf-8")

            settings = SettingsStorage(path).load()

            self.assertEqual(AppSettings(60, 256, "eu-west-1", "DEBUG"), settings)

    def test_save_sanitizes_minimum_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            storage = SettingsStorage(path)
            settings = AppSettings(
                refresh_interval_seconds=0,
                thumbnail_size=-5,
                default_region="",
                log_level="info",
            )

            storage.save(settings)

            saved = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(5, saved["refresh_interval_seconds"])
            self.assertEqual(64, saved["thumbnail_size"])
            self.assertEqual("us-east-1", saved["default_region"])
            self.assertEqual("INFO", saved["log_level"])


if __name__ == "__main__":
    unittest.main()
