"""Dithered preview widget for the TUI."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from pico_cam.core.frame import MonochromeBitmap
from pico_cam.core.render import braille_from_bitmap

PLACEHOLDER = "No image available."


class BitmapPreview(Widget):
    """Widget that displays the latest dithered bitmap as braille text.

    Keeps showing the last bitmap until a newer one arrives, so dropped
    frames never blank the preview.
    """

    DEFAULT_CSS = """
    BitmapPreview {
        width: 1fr;
        height: 1fr;
        overflow: auto;
        background: black;
        align: center middle;
    }

    BitmapPreview #preview-content {
        width: auto;
        height: auto;
        color: white;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._current: MonochromeBitmap | None = None
        self._frames_shown = 0

    def compose(self) -> ComposeResult:
        yield Static(PLACEHOLDER, id="preview-content")

    def update_bitmap(self, bitmap: MonochromeBitmap) -> None:
        """Show a new bitmap."""
        self._current = bitmap
        self._frames_shown += 1
        content = self.query_one("#preview-content", Static)
        content.update("\n".join(braille_from_bitmap(bitmap)))

    @property
    def current_bitmap(self) -> MonochromeBitmap | None:
        return self._current

    @property
    def frames_shown(self) -> int:
        return self._frames_shown
