from __future__ import annotations
"""PySide6-based UI for the S3 image gallery."""
from collections import deque
from datetime import datetime, timezone
import logging
import os
from typing import Callable

from PySide6 import QtCore, QtGui, QtWidgets

from .credentials import CredentialStoreError, ValidationError
from .gallery import GalleryState, prune_thumbnails, thumbnail_key
from .models import ImageEntry, StoredCredentials
from .presenter import S3GalleryPresenter
from .settings import MIN_REFRESH_INTERVAL, MIN_THUMBNAIL_SIZE, AppSettings
from .ui_utils import (
    format_date,
    format_last_modified,
    format_size,
    image_file_filter,
    suggest_download_filename,
    unique_download_path,
)

ENTRY_KEY_ROLE = QtCore.Qt.UserRole + 1
MAX_THUMBNAIL_FETCHES = 6
NOTIFICATION_TIMEOUT_MS = 5000
LOGGER = logging.getLogger(__name__)


class _DispatchBridge(QtCore.QObject):
    run = QtCore.Signal(object)


def _pixmap_from_data(data: bytes) -> QtGui.QPixmap | None:
    pixmap = QtGui.QPixmap()
    if not pixmap.loadFromData(data):
        return None
    return pixmap


class CredentialsForm(QtWidgets.QWidget):
    """Collects the bucket credentials and hands them to ``on_submit``."""

    def __init__(
        self,
        parent: QtWidgets.QWidget | None = None,
        *,
        default_region: str,
        on_submit: Callable[[StoredCredentials], None],
    ) -> None:
        super().__init__(parent)
        self._on_submit = on_submit
        self._default_region = default_region

        outer = QtWidgets.QVBoxLayout(self)
        outer.addStretch(1)
        box = QtWidgets.QGroupBox("S3 Configuration")
        box.setMaximumWidth(460)
        layout = QtWidgets.QVBoxLayout(box)
        layout.addWidget(QtWidgets.QLabel("Enter your AWS S3 credentials to connect to your bucket"))

        form = QtWidgets.QFormLayout()
        self.access_key_edit = QtWidgets.QLineEdit()
        self.access_key_edit.setPlaceholderText("AKIA...")
        self.secret_key_edit = QtWidgets.QLineEdit()
        self.secret_key_edit.setPlaceholderText("Enter secret access key")
        self.region_edit = QtWidgets.QLineEdit(default_region)
        self.region_edit.setPlaceholderText("us-east-1")
        self.bucket_edit = QtWidgets.QLineEdit()
        self.bucket_edit.setPlaceholderText("my-image-bucket")
        form.addRow("Access Key ID *:", self.access_key_edit)
        form.addRow("Secret Access Key *:", self.secret_key_edit)
        form.addRow("Region *:", self.region_edit)
        form.addRow("Bucket Name *:", self.bucket_edit)
        layout.addLayout(form)

        self.show_secrets_check = QtWidgets.QCheckBox("Show secrets")
        self.show_secrets_check.toggled.connect(self._apply_echo_mode)
        layout.addWidget(self.show_secrets_check)

        self.save_button = QtWidgets.QPushButton("Save Configuration")
        self.save_button.setDefault(True)
        self.save_button.clicked.connect(self._on_save)
        layout.addWidget(self.save_button)

        note = QtWidgets.QLabel(
            "Your access key, region and bucket are stored in your home directory; "
            "the secret key is kept in the system keychain."
        )
        note.setWordWrap(True)
        layout.addWidget(note)

        row = QtWidgets.QHBoxLayout()
        row.addStretch(1)
        row.addWidget(box)
        row.addStretch(1)
        outer.addLayout(row)
        outer.addStretch(2)

        for edit in (self.access_key_edit, self.secret_key_edit, self.region_edit, self.bucket_edit):
            edit.returnPressed.connect(self._on_save)
        self._apply_echo_mode(False)

    def set_credentials(self, credentials: StoredCredentials | None) -> None:
        self.access_key_edit.setText(credentials.access_key_id if credentials else "")
        self.secret_key_edit.setText(credentials.secret_access_key if credentials else "")
        self.region_edit.setText((credentials.region if credentials else "") or self._default_region)
        self.bucket_edit.setText(credentials.bucket_name if credentials else "")

    def set_saving(self, saving: bool) -> None:
        self.save_button.setEnabled(not saving)
        self.save_button.setText("Saving..." if saving else "Save Configuration")

    def _apply_echo_mode(self, show: bool) -> None:
        mode = QtWidgets.QLineEdit.Normal if show else QtWidgets.QLineEdit.Password
        self.access_key_edit.setEchoMode(mode)
        self.secret_key_edit.setEchoMode(mode)

    def _on_save(self) -> None:
        self._on_submit(
            StoredCredentials(
                access_key_id=self.access_key_edit.text(),
                secret_access_key=self.secret_key_edit.text(),
                region=self.region_edit.text(),
                bucket_name=self.bucket_edit.text(),
            )
        )


class GalleryPage(QtWidgets.QWidget):
    """Grid of images with loading, error and empty states."""

    def __init__(
        self,
        parent: QtWidgets.QWidget | None = None,
        *,
        thumbnail_size: int,
        on_refresh: Callable[[], None],
        on_retry: Callable[[], None],
        on_upload: Callable[[], None],
        on_open: Callable[[str], None],
    ) -> None:
        super().__init__(parent)
        self._on_open = on_open

        layout = QtWidgets.QVBoxLayout(self)
        header = QtWidgets.QHBoxLayout()
        titles = QtWidgets.QVBoxLayout()
        title = QtWidgets.QLabel("S3 Image Gallery")
        font = title.font()
        font.setPointSize(font.pointSize() + 6)
        font.setBold(True)
        title.setFont(font)
        titles.addWidget(title)
        self.summary_label = QtWidgets.QLabel("")
        titles.addWidget(self.summary_label)
        header.addLayout(titles)
        header.addStretch(1)
        self.upload_button = QtWidgets.QPushButton("Upload")
        self.upload_button.clicked.connect(lambda: on_upload())
        header.addWidget(self.upload_button)
        self.refresh_button = QtWidgets.QPushButton("Refresh")
        self.refresh_button.clicked.connect(lambda: on_refresh())
        header.addWidget(self.refresh_button)
        layout.addLayout(header)

        self._stack = QtWidgets.QStackedWidget(self)
        layout.addWidget(self._stack, stretch=1)

        self.loading_label = QtWidgets.QLabel("Loading images...")
        self.loading_label.setAlignment(QtCore.Qt.AlignCenter)
        self._stack.addWidget(self.loading_label)

        self.error_panel = QtWidgets.QWidget()
        error_layout = QtWidgets.QVBoxLayout(self.error_panel)
        error_layout.addStretch(1)
        error_title = QtWidgets.QLabel("Unable to load images")
        error_title.setAlignment(QtCore.Qt.AlignCenter)
        error_layout.addWidget(error_title)
        self.error_label = QtWidgets.QLabel("")
        self.error_label.setAlignment(QtCore.Qt.AlignCenter)
        self.error_label.setWordWrap(True)
        error_layout.addWidget(self.error_label)
        retry_button = QtWidgets.QPushButton("Try Again")
        retry_button.clicked.connect(lambda: on_retry())
        retry_row = QtWidgets.QHBoxLayout()
        retry_row.addStretch(1)
        retry_row.addWidget(retry_button)
        retry_row.addStretch(1)
        error_layout.addLayout(retry_row)
        error_layout.addStretch(1)
        self._stack.addWidget(self.error_panel)

        self.empty_label = QtWidgets.QLabel(
            "No images found\nUpload images to your S3 bucket to see them here"
        )
        self.empty_label.setAlignment(QtCore.Qt.AlignCenter)
        self._stack.addWidget(self.empty_label)

        self.grid = QtWidgets.QListWidget()
        self.grid.setViewMode(QtWidgets.QListView.IconMode)
        self.grid.setResizeMode(QtWidgets.QListView.Adjust)
        self.grid.setMovement(QtWidgets.QListView.Static)
        self.grid.setUniformItemSizes(True)
        self.grid.setSpacing(12)
        self.grid.setWordWrap(True)
        self.grid.itemActivated.connect(self._handle_item_activated)
        self._stack.addWidget(self.grid)

        self._placeholder = QtGui.QPixmap(thumbnail_size, thumbnail_size)
        self.set_thumbnail_size(thumbnail_size)

    def set_thumbnail_size(self, size: int) -> None:
        self._thumbnail_size = size
        self.grid.setIconSize(QtCore.QSize(size, size))
        self.grid.setGridSize(QtCore.QSize(size + 24, size + 56))
        self._placeholder = QtGui.QPixmap(size, size)
        self._placeholder.fill(QtGui.QColor("#d0d0d0"))

    def display_state(self, state: GalleryState, thumbnails: dict[tuple, QtGui.QPixmap]) -> None:
        self.refresh_button.setEnabled(not state.busy)
        self.refresh_button.setText("Refreshing..." if state.refreshing else "Refresh")
        if state.loading and not state.entries:
            self.summary_label.setText("")
            self._stack.setCurrentWidget(self.loading_label)
            return
        if state.error is not None:
            self.summary_label.setText("")
            self.error_label.setText(state.error)
            self._stack.setCurrentWidget(self.error_panel)
            return
        self.summary_label.setText(state.summary())
        if not state.entries:
            self._stack.setCurrentWidget(self.empty_label)
            return
        self._populate_grid(state.entries, thumbnails)
        self._stack.setCurrentWidget(self.grid)

    def set_thumbnail(self, key: str, pixmap: QtGui.QPixmap) -> None:
        for row in range(self.grid.count()):
            item = self.grid.item(row)
            if item.data(ENTRY_KEY_ROLE) == key:
                item.setIcon(QtGui.QIcon(self.scale_thumbnail(pixmap)))
                return

    def _populate_grid(self, entries: list[ImageEntry], thumbnails: dict[tuple, QtGui.QPixmap]) -> None:
        self.grid.clear()
        for entry in entries:
            pixmap = thumbnails.get(thumbnail_key(entry))
            icon = QtGui.QIcon(self.scale_thumbnail(pixmap) if pixmap else self._placeholder)
            text = f"{entry.name}\n{format_size(entry.size)} · {format_date(entry.last_modified)}"
            item = QtWidgets.QListWidgetItem(icon, text)
            item.setData(ENTRY_KEY_ROLE, entry.key)
            item.setToolTip(entry.key)
            self.grid.addItem(item)

    def scale_thumbnail(self, pixmap: QtGui.QPixmap) -> QtGui.QPixmap:
        return pixmap.scaled(
            self._thumbnail_size,
            self._thumbnail_size,
            QtCore.Qt.KeepAspectRatioByExpanding,
            QtCore.Qt.SmoothTransformation,
        )

    def _handle_item_activated(self, item: QtWidgets.QListWidgetItem) -> None:
        key = item.data(ENTRY_KEY_ROLE)
        if key:
            self._on_open(key)


class GalleryWindow(QtWidgets.QMainWindow):
    """Main window switching between the configuration form and the gallery."""

    def __init__(self, presenter: S3GalleryPresenter | None = None):
        super().__init__()
        self.setWindowTitle("S3 Image Gallery")
        self.resize(960, 800)
        self.setMinimumSize(480, 480)

        self._dispatch_bridge = _DispatchBridge()
        self._dispatch_bridge.run.connect(lambda func: func())
        self.presenter = presenter or S3GalleryPresenter(dispatch=self._dispatch)
        self._settings = self.presenter.settings
        self._state = GalleryState()
        self._thumbnails: dict[tuple, QtGui.QPixmap] = {}
        self._thumbnail_queue: deque[ImageEntry] = deque()
        self._thumbnails_in_flight: set[tuple] = set()

        self._refresh_timer = QtCore.QTimer(self)
        self._refresh_timer.setInterval(self._settings.refresh_interval_seconds * 1000)
        self._refresh_timer.timeout.connect(self._auto_refresh)

        self._create_menu()
        self._create_widgets()
        if self.presenter.is_configured:
            self._show_gallery()
        else:
            self._show_configuration()

    def _dispatch(self, func: Callable[[], None]) -> None:
        self._dispatch_bridge.run.emit(func)

    def _create_menu(self) -> None:
        menubar = self.menuBar()
        gallery_menu = menubar.addMenu("Gallery")
        self.refresh_action = gallery_menu.addAction("Refresh")
        self.refresh_action.setShortcut(QtGui.QKeySequence.Refresh)
        self.refresh_action.triggered.connect(self.refresh_images)
        self.upload_action = gallery_menu.addAction("Upload Image...")
        self.upload_action.triggered.connect(self.upload_image)
        gallery_menu.addSeparator()
        credentials_action = gallery_menu.addAction("Change Credentials...")
        credentials_action.triggered.connect(self._show_configuration)
        settings_action = gallery_menu.addAction("Settings...")
        settings_action.triggered.connect(self.open_settings_dialog)
        gallery_menu.addSeparator()
        quit_action = gallery_menu.addAction("Quit")
        quit_action.setShortcut(QtGui.QKeySequence.Quit)
        quit_action.triggered.connect(self.close)

    def _create_widgets(self) -> None:
        self._pages = QtWidgets.QStackedWidget(self)
        self.setCentralWidget(self._pages)
        self.credentials_form = CredentialsForm(
            self,
            default_region=self._settings.default_region,
            on_submit=self.save_credentials,
        )
        self.gallery_page = GalleryPage(
            self,
            thumbnail_size=self._settings.thumbnail_size,
            on_refresh=self.refresh_images,
            on_retry=self.load_images,
            on_upload=self.upload_image,
            on_open=self.open_image,
        )
        self._pages.addWidget(self.credentials_form)
        self._pages.addWidget(self.gallery_page)

    def _show_configuration(self, *_: object) -> None:
        self._refresh_timer.stop()
        self.credentials_form.set_credentials(self.presenter.credentials)
        self._pages.setCurrentWidget(self.credentials_form)
        self._set_gallery_actions_enabled(False)

    def _show_gallery(self) -> None:
        self._pages.setCurrentWidget(self.gallery_page)
        self._set_gallery_actions_enabled(True)
        self._state = GalleryState()
        self._thumbnail_queue.clear()
        self.load_images()
        self._refresh_timer.start()

    def _set_gallery_actions_enabled(self, enabled: bool) -> None:
        self.refresh_action.setEnabled(enabled)
        self.upload_action.setEnabled(enabled)

    def save_credentials(self, credentials: StoredCredentials) -> None:
        self.credentials_form.set_saving(True)
        try:
            saved = self.presenter.save_credentials(credentials)
        except ValidationError as exc:
            self._notify(str(exc))
            return
        except CredentialStoreError as exc:
            LOGGER.exception("Failed to save credentials")
            self._notify(f"Failed to save configuration: {exc}")
            return
        finally:
            self.credentials_form.set_saving(False)
        self._notify(f"Configuration saved for bucket '{saved.bucket_name}'")
        if not self.presenter.is_configured:
            self._notify("Unable to create an S3 client with these credentials")
            return
        self._show_gallery()

    def load_images(self, *_: object) -> None:
        self._fetch_images(refresh=False)

    def refresh_images(self, *_: object) -> None:
        if self._pages.currentWidget() is not self.gallery_page:
            return
        self._fetch_images(refresh=True)

    def _auto_refresh(self) -> None:
        if not self._state.accepts_auto_refresh:
            LOGGER.debug("Skipping auto-refresh while a listing is in flight")
            return
        self.refresh_images()

    def _fetch_images(self, *, refresh: bool) -> None:
        refresh = self._state.begin(refresh=refresh)
        self._render()
        self.presenter.load_images(
            refresh=refresh,
            on_success=lambda entries: self._handle_images_loaded(entries, refresh),
            on_error=lambda message: self._handle_images_error(message, refresh),
            on_done=self._handle_images_done,
        )

    def _handle_images_loaded(self, entries: list[ImageEntry], refresh: bool) -> None:
        self._state.apply_success(entries)
        prune_thumbnails(self._thumbnails, entries)
        if refresh:
            self._notify(f"Gallery refreshed. Found {len(entries)} image(s)")
        self._queue_thumbnails(entries)

    def _handle_images_error(self, message: str, refresh: bool) -> None:
        transient = self._state.apply_failure(message, refresh=refresh)
        if transient:
            self._notify(f"Refresh failed: {transient}")

    def _handle_images_done(self) -> None:
        self._state.finish()
        self._render()

    def _render(self) -> None:
        self.gallery_page.display_state(self._state, self._thumbnails)

    def _queue_thumbnails(self, entries: list[ImageEntry]) -> None:
        self._thumbnail_queue = deque(
            entry for entry in entries if thumbnail_key(entry) not in self._thumbnails
        )
        self._start_thumbnail_fetches()

    def _start_thumbnail_fetches(self) -> None:
        while self._thumbnail_queue and len(self._thumbnails_in_flight) < MAX_THUMBNAIL_FETCHES:
            entry = self._thumbnail_queue.popleft()
            cache_key = thumbnail_key(entry)
            if cache_key in self._thumbnails or cache_key in self._thumbnails_in_flight:
                continue
            self._thumbnails_in_flight.add(cache_key)
            self.presenter.fetch_image(
                entry,
                on_success=lambda data, key=cache_key: self._handle_thumbnail(key, data),
                on_error=lambda _message, key=cache_key: self._handle_thumbnail(key, None),
            )

    def _handle_thumbnail(self, cache_key: tuple, data: bytes | None) -> None:
        self._thumbnails_in_flight.discard(cache_key)
        pixmap = _pixmap_from_data(data) if data else None
        listed = any(thumbnail_key(entry) == cache_key for entry in self._state.entries)
        if pixmap is not None and listed:
            thumbnail = self.gallery_page.scale_thumbnail(pixmap)
            self._thumbnails[cache_key] = thumbnail
            self.gallery_page.set_thumbnail(cache_key[0], thumbnail)
        self._start_thumbnail_fetches()

    def open_image(self, key: str) -> None:
        try:
            entry = self._state.select(key)
        except ValueError:
            return
        dialog = ImageDetailDialog(
            self,
            entry=entry,
            preview=self._thumbnails.get(thumbnail_key(entry)),
            on_download=lambda: self._download_image(entry),
        )
        if entry.url_expired(datetime.now(timezone.utc)):
            dialog.display_error("The signed URL has expired. Refresh the gallery to view this image.")
        else:
            self.presenter.fetch_image(
                entry,
                on_success=dialog.display_image,
                on_error=dialog.display_error,
            )
        dialog.exec()
        self._state.clear_selection()

    def _download_image(self, entry: ImageEntry) -> None:
        if entry.url_expired(datetime.now(timezone.utc)):
            self._show_error("Download Error", "The signed URL has expired. Refresh the gallery and try again.")
            return
        downloads = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.DownloadLocation)
        default_path = unique_download_path(downloads or os.path.expanduser("~"), suggest_download_filename(entry.key))
        destination, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Save Image", default_path)
        if not destination:
            return
        self._notify(f"Downloading {entry.name}...")
        self.presenter.download_image(
            entry,
            destination=destination,
            on_success=lambda: self._notify(f"Saved {entry.name} to {destination}"),
            on_error=lambda message: self._show_error("Download Error", f"Error downloading image: {message}"),
        )

    def upload_image(self, *_: object) -> None:
        if not self.presenter.is_configured:
            self._show_error("Error", "Please configure your S3 credentials first")
            return
        source_path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Upload Image", "", image_file_filter())
        if not source_path:
            return
        self._notify(f"Uploading {os.path.basename(source_path)}...")

        def handle_success(key: str) -> None:
            self._notify(f"Uploaded {key}")
            self.refresh_images()

        self.presenter.upload_image(
            source_path=source_path,
            on_success=handle_success,
            on_error=lambda message: self._notify(f"Upload failed: {message}"),
        )

    def open_settings_dialog(self, *_: object) -> None:
        dialog = SettingsDialog(self, settings=self._settings)
        if dialog.exec() != QtWidgets.QDialog.Accepted or dialog.result_settings is None:
            return
        resized = dialog.result_settings.thumbnail_size != self._settings.thumbnail_size
        self._settings = dialog.result_settings
        self.presenter.save_settings(self._settings)
        self._refresh_timer.setInterval(self._settings.refresh_interval_seconds * 1000)
        self.gallery_page.set_thumbnail_size(self._settings.thumbnail_size)
        if resized:
            # Cached thumbnails are stored at the previous size.
            self._thumbnails.clear()
        self._render()
        if resized:
            self._queue_thumbnails(self._state.entries)

    def _notify(self, message: str) -> None:
        self.statusBar().showMessage(message, NOTIFICATION_TIMEOUT_MS)

    def _show_error(self, title: str, message: str) -> None:
        QtWidgets.QMessageBox.critical(self, title, message)
        self._notify(message)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self._refresh_timer.stop()
        super().closeEvent(event)


class ImageDetailDialog(QtWidgets.QDialog):
    """Modal dialog showing one image at full resolution."""

    def __init__(
        self,
        parent: QtWidgets.QWidget,
        *,
        entry: ImageEntry,
        preview: QtGui.QPixmap | None = None,
        on_download: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(entry.name)
        self.setModal(True)
        self.resize(900, 720)
        self._entry = entry
        self._pixmap: QtGui.QPixmap | None = preview
        self._on_download = on_download

        layout = QtWidgets.QVBoxLayout(self)
        info = QtWidgets.QLabel(
            f"Size: {format_size(entry.size)}  •  Modified: {format_last_modified(entry.last_modified)}"
        )
        layout.addWidget(info)

        self.image_label = QtWidgets.QLabel("Loading image...")
        self.image_label.setAlignment(QtCore.Qt.AlignCenter)
        self.image_label.setMinimumSize(320, 240)
        self.image_label.setSizePolicy(QtWidgets.QSizePolicy.Ignored, QtWidgets.QSizePolicy.Ignored)
        layout.addWidget(self.image_label, stretch=1)

        button_row = QtWidgets.QHBoxLayout()
        button_row.addStretch(1)
        if self._on_download:
            download_button = QtWidgets.QPushButton("Download")
            download_button.clicked.connect(self._handle_download)
            button_row.addWidget(download_button)
        browser_button = QtWidgets.QPushButton("Open in Browser")
        browser_button.clicked.connect(self._open_in_browser)
        button_row.addWidget(browser_button)
        close_button = QtWidgets.QPushButton("Close")
        close_button.clicked.connect(self.reject)
        button_row.addWidget(close_button)
        layout.addLayout(button_row)

        if preview is not None:
            self._update_image()

    def display_image(self, data: bytes) -> None:
        pixmap = _pixmap_from_data(data)
        if pixmap is None:
            self.display_error("Unable to decode image data")
            return
        self._pixmap = pixmap
        self._update_image()

    def display_error(self, message: str) -> None:
        if self._pixmap is None:
            self.image_label.setText(f"Error loading image: {message}")
        else:
            self.image_label.setToolTip(f"Error loading full image: {message}")

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._update_image()

    def _update_image(self) -> None:
        if self._pixmap is None:
            return
        target = self.image_label.size()
        if self._pixmap.width() <= target.width() and self._pixmap.height() <= target.height():
            self.image_label.setPixmap(self._pixmap)
            return
        self.image_label.setPixmap(
            self._pixmap.scaled(target, QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation)
        )

    def _handle_download(self) -> None:
        if self._on_download:
            self._on_download()

    def _open_in_browser(self) -> None:
        QtGui.QDesktopServices.openUrl(QtCore.QUrl(self._entry.url))


class SettingsDialog(QtWidgets.QDialog):
    """Dialog for editing refresh and thumbnail settings."""

    def __init__(self, parent: QtWidgets.QWidget, *, settings: AppSettings) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.result_settings: AppSettings | None = None
        self._settings = settings

        layout = QtWidgets.QVBoxLayout(self)
        form = QtWidgets.QFormLayout()
        self.refresh_spin = QtWidgets.QSpinBox()
        self.refresh_spin.setRange(MIN_REFRESH_INTERVAL, 3600)
        self.refresh_spin.setSuffix(" s")
        self.refresh_spin.setValue(settings.refresh_interval_seconds)
        form.addRow("Auto-refresh interval:", self.refresh_spin)
        self.thumbnail_spin = QtWidgets.QSpinBox()
        self.thumbnail_spin.setRange(MIN_THUMBNAIL_SIZE, 512)
        self.thumbnail_spin.setSuffix(" px")
        self.thumbnail_spin.setValue(settings.thumbnail_size)
        form.addRow("Thumbnail size:", self.thumbnail_spin)
        self.region_edit = QtWidgets.QLineEdit(settings.default_region)
        form.addRow("Default region:", self.region_edit)
        layout.addLayout(form)

        buttons = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _on_save(self) -> None:
        region = self.region_edit.text().strip()
        if not region:
            QtWidgets.QMessageBox.critical(self, "Error", "Default region cannot be empty")
            return
        self.result_settings = AppSettings(
            refresh_interval_seconds=self.refresh_spin.value(),
            thumbnail_size=self.thumbnail_spin.value(),
            default_region=region,
            log_level=self._settings.log_level,
        )
        self.accept()
