from __future__ import annotations
"""UI-agnostic helpers for formatting gallery entries."""
from datetime import datetime
import os

from .models import IMAGE_EXTENSIONS


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    value = float(max(size, 0))
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


def format_last_modified(last_modified: object) -> str:
    if not last_modified:
        return "-"
    if isinstance(last_modified, datetime):
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or last_modified.isoformat()
    try:
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or str(last_modified)
    except AttributeError:
        return str(last_modified)


def format_date(last_modified: object) -> str:
    if isinstance(last_modified, datetime):
        return last_modified.strftime("%Y-%m-%d")
    return "-"


def suggest_download_filename(key: str) -> str:
    cleaned = key.strip().rstrip("/")
    if not cleaned:
        return "image"
    name = cleaned.rsplit("/", 1)[-1]
    return name or "image"


def unique_download_path(target_dir: str, filename: str) -> str:
    base, ext = os.path.splitext(filename)
    candidate = os.path.join(target_dir, filename)
    counter = 1
    while os.path.exists(candidate):
        candidate = os.path.join(target_dir, f"{base} ({counter}){ext}")
        counter += 1
    return candidate


def image_file_filter() -> str:
    patterns = " ".join(f"*{ext}" for ext in IMAGE_EXTENSIONS)
    return f"Images ({patterns});;All files (*)"
