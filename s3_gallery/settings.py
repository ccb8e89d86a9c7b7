from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import dataclass
import json
import logging
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MIN_REFRESH_INTERVAL = 5
MIN_THUMBNAIL_SIZE = 64

LOGGER = logging.getLogger(__name__)


@dataclass
class AppSettings:
    """Simple container for persistent app settings."""

    refresh_interval_seconds: int = 30
    thumbnail_size: int = 180
    default_region: str = "us-east-1"
    log_level: str = "WARNING"


def _coerce_int(value: object, default: int, minimum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < minimum:
        return default
    return number


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3gallery_settings.json"
        self._path = Path(storage_path)

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Using default settings; unable to read %s", self._path)
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        defaults = AppSettings()
        region = data.get("default_region")
        if not isinstance(region, str) or not region.strip():
            region = defaults.default_region
        log_level = data.get("log_level")
        if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
            log_level = defaults.log_level
        return AppSettings(
            refresh_interval_seconds=_coerce_int(
                data.get("refresh_interval_seconds"),
                defaults.refresh_interval_seconds,
                MIN_REFRESH_INTERVAL,
            ),
            thumbnail_size=_coerce_int(data.get("thumbnail_size"), defaults.thumbnail_size, MIN_THUMBNAIL_SIZE),
            default_region=region.strip(),
            log_level=log_level.upper(),
        )

    def save(self, settings: AppSettings) -> None:
        log_level = settings.log_level.upper() if settings.log_level.upper() in LOG_LEVELS else AppSettings.log_level
        payload = {
            "refresh_interval_seconds": max(int(settings.refresh_interval_seconds), MIN_REFRESH_INTERVAL),
            "thumbnail_size": max(int(settings.thumbnail_size), MIN_THUMBNAIL_SIZE),
            "default_region": settings.default_region.strip() or AppSettings.default_region,
            "log_level": log_level,
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            LOGGER.warning("Unable to write settings to %s", self._path)
