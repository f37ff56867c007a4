"""Frame extraction from still images, GIFs and video files.

Provides a unified lazy iterator interface yielding RawFrames.
GIF frames are composited onto a canvas to handle disposal methods correctly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import cv2
from PIL import Image

from pico_cam.core.frame import ChannelOrder, RawFrame

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")
VIDEO_SUFFIXES = (".mp4", ".avi", ".mov", ".mkv", ".webm")


@dataclass
class Frame:
    """A single source frame with its display timing."""

    raw: RawFrame
    duration_ms: int  # Display duration in milliseconds
    index: int


@dataclass
class MediaInfo:
    """Metadata about the input file."""

    path: Path
    format: str  # "image", "gif" or "video"
    frame_count: int
    fps: float
    width: int
    height: int


def detect_format(path: Path) -> str:
    """Detect media format from file extension."""
    suffix = path.suffix.lower()
    if suffix == ".gif":
        return "gif"
    if suffix in IMAGE_SUFFIXES:
        return "image"
    if suffix in VIDEO_SUFFIXES:
        return "video"
    raise ValueError(f"Unsupported format: {suffix}")


class ImageReader:
    """Single still image exposed as a one-frame source."""

    def __init__(self, path: Path) -> None:
        self.path = path
        with Image.open(path) as img:
            self._width, self._height = img.size

    @property
    def info(self) -> MediaInfo:
        return MediaInfo(
            path=self.path,
            format="image",
            frame_count=1,
            fps=1.0,
            width=self._width,
            height=self._height,
        )

    def frames(self) -> Iterator[Frame]:
        yield self.seek(0)

    def seek(self, frame_idx: int) -> Frame:
        if frame_idx != 0:
            raise IndexError(f"Frame {frame_idx} not found")
        with Image.open(self.path) as img:
            raw = RawFrame.from_image(img)
        return Frame(raw=raw, duration_ms=1000, index=0)

    @property
    def frame_count(self) -> int:
        return 1


class GifReader:
    """Lazy frame iterator for GIF files with proper disposal handling."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._img = Image.open(path)
        self._frame_count = getattr(self._img, "n_frames", 1)

    @property
    def info(self) -> MediaInfo:
        duration = self._img.info.get("duration", 100)
        fps = 1000.0 / max(duration, 1)
        return MediaInfo(
            path=self.path,
            format="gif",
            frame_count=self._frame_count,
            fps=fps,
            width=self._img.width,
            height=self._img.height,
        )

    def frames(self) -> Iterator[Frame]:
        """Yield all frames with GIF disposal compositing."""
        img = Image.open(self.path)
        canvas = Image.new("RGBA", img.size, (0, 0, 0, 255))

        for i in range(self._frame_count):
            img.seek(i)
            duration = img.info.get("duration", 100)

            frame = img.convert("RGBA")
            canvas.paste(frame, (0, 0), frame)

            yield Frame(
                raw=RawFrame.from_image(canvas),
                duration_ms=max(duration, 10),  # Clamp absurdly short durations
                index=i,
            )

    def seek(self, frame_idx: int) -> Frame:
        """Get a specific frame by index (composites up to that frame)."""
        if not 0 <= frame_idx < self._frame_count:
            raise IndexError(f"Frame {frame_idx} not found")
        img = Image.open(self.path)
        canvas = Image.new("RGBA", img.size, (0, 0, 0, 255))

        for i in range(frame_idx + 1):
            img.seek(i)
            frame = img.convert("RGBA")
            canvas.paste(frame, (0, 0), frame)

        duration = img.info.get("duration", 100)
        return Frame(
            raw=RawFrame.from_image(canvas),
            duration_ms=max(duration, 10),
            index=frame_idx,
        )

    @property
    def frame_count(self) -> int:
        return self._frame_count


class VideoReader:
    """Lazy frame iterator for MP4/video files using OpenCV."""

    def __init__(self, path: Path) -> None:
        self.path = path
        cap = cv2.VideoCapture(str(path))
        if not cap.isOpened():
            raise IOError(f"Cannot open video: {path}")
        self._frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self._fps = cap.get(cv2.CAP_PROP_FPS) or 24.0
        self._width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        cap.release()

    @property
    def info(self) -> MediaInfo:
        return MediaInfo(
            path=self.path,
            format="video",
            frame_count=self._frame_count,
            fps=self._fps,
            width=self._width,
            height=self._height,
        )

    def frames(self) -> Iterator[Frame]:
        """Yield all frames lazily as BGRA RawFrames."""
        cap = cv2.VideoCapture(str(self.path))
        duration_ms = int(1000.0 / self._fps)
        idx = 0
        try:
            while True:
                ret, bgr = cap.read()
                if not ret:
                    break
                yield Frame(
                    raw=RawFrame.from_array(bgr, ChannelOrder.BGRA),
                    duration_ms=duration_ms,
                    index=idx,
                )
                idx += 1
        finally:
            cap.release()
        logger.debug("Read %d frames from %s", idx, self.path)

    def seek(self, frame_idx: int) -> Frame:
        """Get a specific frame by index."""
        cap = cv2.VideoCapture(str(self.path))
        cap.set(cv2.CAP_PROP_POS_FRAMES, frame_idx)
        ret, bgr = cap.read()
        cap.release()
        if not ret:
            raise IndexError(f"Frame {frame_idx} not found")
        duration_ms = int(1000.0 / self._fps)
        return Frame(
            raw=RawFrame.from_array(bgr, ChannelOrder.BGRA),
            duration_ms=duration_ms,
            index=frame_idx,
        )

    @property
    def frame_count(self) -> int:
        return self._frame_count


MediaReader = ImageReader | GifReader | VideoReader


def open_media(path: str | Path) -> MediaReader:
    """Open a media file and return the appropriate reader."""
    local_path = Path(path)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")

    fmt = detect_format(local_path)
    logger.debug("Opening %s as %s", local_path, fmt)
    if fmt == "gif":
        return GifReader(local_path)
    if fmt == "image":
        return ImageReader(local_path)
    return VideoReader(local_path)
