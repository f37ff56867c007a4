"""Save dithered bitmaps as still images, GIFs or MP4s.

Bitmaps become Pillow "L" images, optionally blown up with nearest-neighbour
so the pixels stay hard-edged. Animations are saved with Pillow (GIF) or
OpenCV VideoWriter (MP4).
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator

import cv2
import numpy as np
from PIL import Image

from pico_cam.core.frame import MonochromeBitmap
from pico_cam.core.pipeline import ProcessedFrame

SNAPSHOT_PREFIX = "pico_cam"
VIDEO_OUTPUT_SUFFIXES = (".mp4", ".avi", ".mov")


def _is_still_format(suffix: str) -> bool:
    """True if Pillow has a writer for this file extension."""
    fmt = Image.registered_extensions().get(suffix)
    return fmt is not None and fmt in Image.SAVE


def bitmap_to_image(bitmap: MonochromeBitmap, scale: int = 1) -> Image.Image:
    """Convert a bitmap to a grayscale Pillow image.

    Args:
        bitmap: the dithered bitmap.
        scale: integer upscale factor (1 = native 160x120).

    Returns:
        Pillow image in mode "L".
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")
    # A 2-D uint8 array always comes back as mode "L".
    img = Image.fromarray(np.ascontiguousarray(bitmap.pixels, dtype=np.uint8))
    if scale != 1:
        img = img.resize(
            (bitmap.width * scale, bitmap.height * scale), Image.Resampling.NEAREST
        )
    return img


def save_bitmap(bitmap: MonochromeBitmap, output_path: Path, scale: int = 1) -> Path:
    """Save one bitmap; the format follows the file extension."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    bitmap_to_image(bitmap, scale).save(str(output_path))
    return output_path


def snapshot_path(directory: Path, now: datetime | None = None) -> Path:
    """Timestamped PNG path for a snapshot, e.g. pico_cam_20240810_141500.png."""
    now = now or datetime.now()
    return Path(directory) / f"{SNAPSHOT_PREFIX}_{now:%Y%m%d_%H%M%S}.png"


def save_gif(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    scale: int = 1,
    on_progress: Callable[[int, int], None] | None = None,
    total_frames: int = 0,
) -> None:
    """Save processed frames as an animated GIF.

    Args:
        frames: iterator of ProcessedFrame objects.
        output_path: path to write the GIF.
        scale: nearest-neighbour upscale factor.
        on_progress: callback(current_frame, total_frames).
        total_frames: total frame count for progress reporting.
    """
    images: list[Image.Image] = []
    durations: list[int] = []

    for i, frame in enumerate(frames):
        images.append(bitmap_to_image(frame.bitmap, scale))
        durations.append(frame.duration_ms)
        if on_progress:
            on_progress(i + 1, total_frames)

    if not images:
        raise ValueError("No frames to save")

    images[0].save(
        str(output_path),
        save_all=True,
        append_images=images[1:],
        duration=durations,
        loop=0,
        disposal=2,
    )


def save_mp4(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    fps: float = 24.0,
    scale: int = 1,
    on_progress: Callable[[int, int], None] | None = None,
    total_frames: int = 0,
) -> None:
    """Save processed frames as an MP4 video.

    Args:
        frames: iterator of ProcessedFrame objects.
        output_path: path to write the MP4.
        fps: output frame rate.
        scale: nearest-neighbour upscale factor.
        on_progress: callback(current_frame, total_frames).
        total_frames: total frame count for progress reporting.
    """
    writer: cv2.VideoWriter | None = None
    written = 0

    try:
        for i, frame in enumerate(frames):
            gray = np.array(bitmap_to_image(frame.bitmap, scale))
            bgr = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

            if writer is None:
                h, w = bgr.shape[:2]
                fourcc = cv2.VideoWriter_fourcc(*"mp4v")
                writer = cv2.VideoWriter(str(output_path), fourcc, fps, (w, h))

            writer.write(bgr)
            written += 1
            if on_progress:
                on_progress(i + 1, total_frames)
    finally:
        if writer is not None:
            writer.release()

    if written == 0:
        raise ValueError("No frames to save")


def save_output(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    fps: float = 24.0,
    scale: int = 1,
    on_progress: Callable[[int, int], None] | None = None,
    total_frames: int = 0,
) -> None:
    """Save frames in the format given by the output file extension.

    Animated formats take every frame. Any other extension Pillow can write
    (png, jpg, bmp, ...) takes the first one.
    """
    suffix = output_path.suffix.lower()
    if suffix == ".gif":
        save_gif(frames, output_path, scale, on_progress, total_frames)
    elif suffix in VIDEO_OUTPUT_SUFFIXES:
        save_mp4(frames, output_path, fps, scale, on_progress, total_frames)
    elif _is_still_format(suffix):
        first = next(iter(frames), None)
        if first is None:
            raise ValueError("No frames to save")
        save_bitmap(first.bitmap, output_path, scale)
        if on_progress:
            on_progress(1, total_frames)
    else:
        raise ValueError(f"Unsupported output format: {suffix}")
