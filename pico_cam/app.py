"""Main Textual application for the pico_cam live preview."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterator

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Static
from textual.worker import Worker, get_current_worker

from pico_cam.core.camera import CameraSource, run_capture
from pico_cam.core.frame import MonochromeBitmap, RawFrame
from pico_cam.core.reader import MediaReader, open_media
from pico_cam.core.settings import Settings
from pico_cam.core.writer import save_bitmap, snapshot_path
from pico_cam.tui.controls import ControlPanel
from pico_cam.tui.preview import BitmapPreview
from pico_cam.utils.slot import LatestSlot

ABOUT_TEXT = (
    "Pico Cam is a camera for goblins. For folks who remember the days of "
    "yore and a certain eye-ball shaped contraption that you could stick "
    "into a handheld game console."
)


class InfoScreen(ModalScreen[None]):
    """Modal info sheet."""

    BINDINGS = [Binding("escape", "dismiss_info", "Done", priority=True)]

    DEFAULT_CSS = """
    InfoScreen {
        align: center middle;
    }

    InfoScreen #info-dialog {
        width: 60;
        height: 14;
        background: $surface;
        border: thick $accent;
        padding: 1 2;
    }

    InfoScreen #info-title {
        text-style: bold;
        margin-bottom: 1;
    }

    InfoScreen Button {
        margin-top: 1;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="info-dialog"):
            yield Static("Pico Cam", id="info-title")
            yield Static(ABOUT_TEXT, id="info-body")
            yield Button("Done", variant="primary", id="btn-done")

    def action_dismiss_info(self) -> None:
        self.dismiss(None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-done":
            self.dismiss(None)


class PicoCamApp(App):
    """Live dithered camera preview."""

    TITLE = "pico_cam"
    CSS = """
    #main-area {
        height: 1fr;
        width: 1fr;
    }

    #preview-container {
        width: 1fr;
        height: 1fr;
    }

    #status-bar {
        height: 1;
        background: $panel;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("s", "save", "Save", priority=True),
        Binding("i", "info", "Info", priority=True),
        Binding("tab", "toggle_panel", "Toggle Panel"),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        input_path: str | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._settings = settings or Settings()
        self._input_path = input_path
        self._slot: LatestSlot[MonochromeBitmap] = LatestSlot()
        self._capture_worker: Worker | None = None
        self._panel_visible = True

    @property
    def source_label(self) -> str:
        if self._input_path:
            return Path(self._input_path).name
        return f"Camera {self._settings.camera_index}"

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-area"):
            with Vertical(id="preview-container"):
                yield BitmapPreview()
            yield ControlPanel(self.source_label, id="control-panel")
        yield Static("Starting...", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.source_label
        self._capture_worker = self._capture_loop()
        self.set_interval(1.0 / self._settings.fps, self._poll_slot)

    def _update_status(self, text: str) -> None:
        self.query_one("#status-bar", Static).update(text)

    # --- Capture ---

    def _looped_file_frames(self, reader: MediaReader, worker: Worker) -> Iterator[RawFrame]:
        """Replay a media file forever at its own frame rate."""
        while not worker.is_cancelled:
            for frame in reader.frames():
                if worker.is_cancelled:
                    return
                yield frame.raw
                time.sleep(frame.duration_ms / 1000.0)

    @work(thread=True, exclusive=True, group="capture")
    def _capture_loop(self) -> None:
        """Capture and process frames in a background thread."""
        worker = get_current_worker()

        def on_error(error: Exception) -> None:
            self.call_from_thread(self._update_status, f"Dropped frame: {error}")

        try:
            if self._input_path:
                reader = open_media(self._input_path)
                self.call_from_thread(self._update_status, f"Playing {reader.info.path.name}")
                run_capture(
                    self._looped_file_frames(reader, worker),
                    self._slot,
                    should_stop=lambda: worker.is_cancelled,
                    on_error=on_error,
                )
            else:
                with CameraSource(self._settings.camera_index) as camera:
                    self.call_from_thread(self._update_status, "Live")
                    run_capture(
                        camera.frames(),
                        self._slot,
                        should_stop=lambda: worker.is_cancelled,
                        on_error=on_error,
                    )
                if not worker.is_cancelled:
                    self.call_from_thread(self._update_status, "Camera stopped delivering frames")
        except (IOError, ValueError) as e:
            if not worker.is_cancelled:
                self.call_from_thread(self._update_status, f"Error: {e}")

    def _poll_slot(self) -> None:
        """Display the newest bitmap, if any (called on the main thread)."""
        bitmap = self._slot.take()
        if bitmap is None:
            return
        preview = self.query_one(BitmapPreview)
        preview.update_bitmap(bitmap)
        captured, dropped = self._slot.counters()
        self.query_one(ControlPanel).update_counters(
            preview.frames_shown, captured, dropped
        )

    # --- Actions ---

    def action_save(self) -> None:
        bitmap = self.query_one(BitmapPreview).current_bitmap
        if bitmap is None:
            self._update_status("No frame to save")
            return
        self._update_status("Saving...")
        self._do_save(bitmap)

    @work(thread=True, group="save")
    def _do_save(self, bitmap: MonochromeBitmap) -> None:
        """Write a snapshot in a background thread."""
        out = snapshot_path(self._settings.save_dir)
        try:
            save_bitmap(bitmap, out, scale=self._settings.scale)
            self.call_from_thread(self._update_status, f"Saved to {out}")
        except (OSError, ValueError) as e:
            self.call_from_thread(self._update_status, f"Save error: {e}")

    def action_info(self) -> None:
        self.push_screen(InfoScreen())

    def action_toggle_panel(self) -> None:
        panel = self.query_one("#control-panel", ControlPanel)
        self._panel_visible = not self._panel_visible
        panel.display = self._panel_visible

    # --- Message handlers ---

    def on_control_panel_save_requested(self, event: ControlPanel.SaveRequested) -> None:
        self.action_save()

    def on_control_panel_info_requested(self, event: ControlPanel.InfoRequested) -> None:
        self.action_info()


def run_app(settings: Settings | None = None, input_path: str | None = None) -> None:
    """Launch the TUI application."""
    app = PicoCamApp(settings=settings, input_path=input_path)
    app.run()
