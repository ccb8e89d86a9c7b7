from __future__ import annotations
"""View-agnostic state for the image gallery screen."""
from dataclasses import dataclass, field
from typing import Optional

from .models import ImageEntry


@dataclass
class GalleryState:
    """Displayed entries plus the loading, refreshing and error flags.

    A *load* replaces the whole screen: on failure the entries are dropped and
    ``error`` is set so the view can offer a retry. A *refresh* keeps the
    current entries on failure and only reports a transient message.
    """

    entries: list[ImageEntry] = field(default_factory=list)
    loading: bool = False
    refreshing: bool = False
    error: Optional[str] = None
    selected: Optional[ImageEntry] = None

    @property
    def busy(self) -> bool:
        return self.loading or self.refreshing

    @property
    def is_empty(self) -> bool:
        return not self.busy and self.error is None and not self.entries

    @property
    def accepts_auto_refresh(self) -> bool:
        return not self.busy

    def begin(self, *, refresh: bool) -> bool:
        """Start a listing and return whether it runs as a refresh.

        A refresh requested while a load is still running supersedes it, so it
        keeps load semantics: its failure still replaces the screen.
        """
        if refresh and not self.loading:
            self.refreshing = True
            return True
        self.loading = True
        self.error = None
        return False

    def apply_success(self, entries: list[ImageEntry]) -> None:
        self.entries = list(entries)
        self.error = None
        if self.selected is not None and self.selected.key not in {entry.key for entry in self.entries}:
            self.selected = None

    def apply_failure(self, message: str, *, refresh: bool) -> Optional[str]:
        """Record a failed listing.

        Returns the transient message to show, or ``None`` when the failure is
        rendered as the full-screen error state instead.
        """
        if refresh and self.error is None:
            return message
        self.entries = []
        self.error = message
        return None

    def finish(self) -> None:
        self.loading = False
        self.refreshing = False

    def select(self, key: str) -> ImageEntry:
        for entry in self.entries:
            if entry.key == key:
                self.selected = entry
                return entry
        raise ValueError(f"Image '{key}' is not displayed")

    def clear_selection(self) -> None:
        self.selected = None

    def summary(self) -> str:
        count = len(self.entries)
        return f"{count} image{'s' if count != 1 else ''} found"


def thumbnail_key(entry: ImageEntry) -> tuple:
    return (entry.key, entry.last_modified)


def prune_thumbnails(cache: dict, entries: list[ImageEntry]) -> None:
    """Drop cached thumbnails for entries that are no longer listed."""
    live = {thumbnail_key(entry) for entry in entries}
    for cache_key in [cache_key for cache_key in cache if cache_key not in live]:
        del cache[cache_key]
