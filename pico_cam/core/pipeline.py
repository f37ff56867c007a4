"""Frame processing pipeline.

Resample (scale + quarter turn) → grayscale → Floyd-Steinberg dither.

Every caller (CLI, TUI, camera loop) goes through process_frame or one of
its wrappers; nothing here keeps state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from pico_cam.core.dither import floyd_steinberg
from pico_cam.core.errors import InvalidInput
from pico_cam.core.frame import (
    TARGET_HEIGHT,
    TARGET_WIDTH,
    ChannelOrder,
    MonochromeBitmap,
    RawFrame,
)
from pico_cam.core.luminance import to_grayscale
from pico_cam.core.reader import Frame
from pico_cam.core.resample import resample


@dataclass
class ProcessedFrame:
    """A dithered bitmap with the timing of the frame it came from."""

    bitmap: MonochromeBitmap
    duration_ms: int
    index: int


def process_raw(frame: RawFrame) -> MonochromeBitmap:
    """Run a RawFrame through the full pipeline."""
    frame.validate()
    color = resample(frame, TARGET_WIDTH, TARGET_HEIGHT)
    gray = to_grayscale(color, frame.channel_order)
    return MonochromeBitmap(floyd_steinberg(gray, TARGET_WIDTH, TARGET_HEIGHT))


def process_frame(
    pixels: bytes,
    width: int,
    height: int,
    stride: int,
    channel_order: ChannelOrder = ChannelOrder.BGRA,
) -> MonochromeBitmap:
    """Convert one packed 4-channel frame into a 160x120 black/white bitmap.

    Raises:
        InvalidInput: non-positive width/height, an empty buffer or an
            unknown channel order.
        DimensionMismatch: stride below width*4, or len(pixels) != stride*height.
    """
    try:
        order = ChannelOrder(channel_order)
    except ValueError:
        raise InvalidInput(f"Unknown channel order: {channel_order!r}") from None
    frame = RawFrame(
        pixels=pixels,
        width=width,
        height=height,
        stride=stride,
        channel_order=order,
    )
    return process_raw(frame)


def process_image(image: Image.Image) -> MonochromeBitmap:
    """Convenience wrapper for Pillow images."""
    return process_raw(RawFrame.from_image(image))


def process_media_frame(frame: Frame) -> ProcessedFrame:
    """Process a frame read from a media file, keeping its timing."""
    return ProcessedFrame(
        bitmap=process_raw(frame.raw),
        duration_ms=frame.duration_ms,
        index=frame.index,
    )
