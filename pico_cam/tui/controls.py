"""Side panel with the shutter and info controls."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, Label, Static


class ControlPanel(Widget):
    """Info and Save buttons plus live frame counters."""

    DEFAULT_CSS = """
    ControlPanel {
        width: 24;
        height: 1fr;
        background: $panel;
        padding: 1;
        border-left: solid $accent;
    }

    ControlPanel #panel-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }

    ControlPanel Button {
        width: 100%;
        margin-top: 1;
    }

    ControlPanel Label {
        margin-top: 1;
        color: $text-muted;
    }
    """

    class SaveRequested(Message):
        """User pressed the shutter."""
        pass

    class InfoRequested(Message):
        """User asked for the info sheet."""
        pass

    def __init__(self, source_label: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._source_label = source_label

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("pico cam", id="panel-title")
            yield Label(self._source_label, id="source-label")
            yield Button("Save", variant="primary", id="btn-save")
            yield Button("Info", variant="default", id="btn-info")
            yield Label("Frames: 0", id="frames-label")
            yield Label("Captured: 0", id="captured-label")
            yield Label("Dropped: 0", id="dropped-label")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-save":
            self.post_message(self.SaveRequested())
        elif event.button.id == "btn-info":
            self.post_message(self.InfoRequested())

    def update_counters(self, shown: int, captured: int, dropped: int) -> None:
        self.query_one("#frames-label", Label).update(f"Frames: {shown}")
        self.query_one("#captured-label", Label).update(f"Captured: {captured}")
        self.query_one("#dropped-label", Label).update(f"Dropped: {dropped}")
