"""Frame and bitmap types shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np
from PIL import Image

from pico_cam.core.errors import DimensionMismatch, InvalidInput

# Fixed output size. Not derived from the source aspect ratio.
TARGET_WIDTH = 160
TARGET_HEIGHT = 120

CHANNELS = 4


class ChannelOrder(str, Enum):
    BGRA = "bgra"
    RGBA = "rgba"

    @property
    def rgb_indices(self) -> tuple[int, int, int]:
        """Positions of (R, G, B) within a packed pixel."""
        if self is ChannelOrder.BGRA:
            return (2, 1, 0)
        return (0, 1, 2)


@dataclass(frozen=True)
class RawFrame:
    """A packed 4-channel color frame, borrowed for one pipeline call."""

    pixels: bytes
    width: int
    height: int
    stride: int
    channel_order: ChannelOrder = ChannelOrder.BGRA

    def validate(self) -> None:
        """Raise InvalidInput / DimensionMismatch for inconsistent frames."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidInput(
                f"Frame dimensions must be positive, got {self.width}x{self.height}"
            )
        if len(self.pixels) == 0:
            raise InvalidInput("Frame buffer is empty")
        if self.stride < self.width * CHANNELS:
            raise DimensionMismatch(
                f"Stride {self.stride} is smaller than {self.width} pixels "
                f"x {CHANNELS} bytes"
            )
        expected = self.stride * self.height
        if len(self.pixels) != expected:
            raise DimensionMismatch(
                f"Buffer holds {len(self.pixels)} bytes, expected "
                f"{expected} ({self.stride} x {self.height})"
            )

    def to_array(self) -> np.ndarray:
        """Read-only (height, width, 4) view of the pixel buffer.

        Row padding beyond width*4 bytes is sliced away without copying.
        """
        self.validate()
        flat = np.frombuffer(self.pixels, dtype=np.uint8)
        rows = flat.reshape(self.height, self.stride)
        return rows[:, : self.width * CHANNELS].reshape(
            self.height, self.width, CHANNELS
        )

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        channel_order: ChannelOrder = ChannelOrder.BGRA,
    ) -> RawFrame:
        """Build a frame from an OpenCV-style array.

        Accepts 2-D grayscale, 3-channel (BGR or RGB, per channel_order)
        and 4-channel arrays. Missing alpha is filled opaque.
        """
        if array.ndim == 2:
            array = cv2.cvtColor(array, cv2.COLOR_GRAY2BGRA)
        elif array.ndim == 3 and array.shape[2] == 3:
            code = (
                cv2.COLOR_BGR2BGRA
                if channel_order is ChannelOrder.BGRA
                else cv2.COLOR_RGB2RGBA
            )
            array = cv2.cvtColor(array, code)
        elif array.ndim != 3 or array.shape[2] != CHANNELS:
            raise InvalidInput(f"Unsupported array shape {array.shape}")

        array = np.ascontiguousarray(array, dtype=np.uint8)
        h, w = array.shape[:2]
        return cls(
            pixels=array.tobytes(),
            width=w,
            height=h,
            stride=w * CHANNELS,
            channel_order=channel_order,
        )

    @classmethod
    def from_image(cls, image: Image.Image) -> RawFrame:
        """Build an RGBA frame from a Pillow image of any mode."""
        rgba = image.convert("RGBA")
        return cls(
            pixels=rgba.tobytes(),
            width=rgba.width,
            height=rgba.height,
            stride=rgba.width * CHANNELS,
            channel_order=ChannelOrder.RGBA,
        )


@dataclass(frozen=True, eq=False)
class MonochromeBitmap:
    """160x120 dithered output, one byte per pixel, each 0 or 255."""

    pixels: np.ndarray  # uint8, shape (height, width)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def tobytes(self) -> bytes:
        """Row-major bytes, no padding."""
        return self.pixels.tobytes()
