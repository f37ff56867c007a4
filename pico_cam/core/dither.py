"""Floyd-Steinberg error diffusion dithering to pure black and white."""

from __future__ import annotations

import numpy as np

from pico_cam.core.errors import DimensionMismatch
from pico_cam.core.frame import TARGET_HEIGHT, TARGET_WIDTH

THRESHOLD = 128
BLACK = 0
WHITE = 255

# (dx, dy, weight) in sixteenths
DIFFUSION = ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1))


def _share(err: int, weight: int) -> int:
    """err * weight / 16, truncated toward zero (not floored)."""
    scaled = err * weight
    if scaled >= 0:
        return scaled // 16
    return -(-scaled // 16)


def _clamp(value: int) -> int:
    if value < BLACK:
        return BLACK
    if value > WHITE:
        return WHITE
    return value


def _as_samples(
    gray: np.ndarray | bytes | bytearray,
    width: int | None,
    height: int | None,
) -> tuple[np.ndarray, int, int]:
    arr = np.asarray(
        np.frombuffer(gray, dtype=np.uint8)
        if isinstance(gray, (bytes, bytearray))
        else gray
    )
    if arr.ndim == 2:
        h, w = arr.shape
        if (width is not None and width != w) or (height is not None and height != h):
            raise DimensionMismatch(
                f"Buffer is {w}x{h}, expected {width}x{height}"
            )
        return arr.reshape(-1), w, h

    w = TARGET_WIDTH if width is None else width
    h = TARGET_HEIGHT if height is None else height
    if arr.ndim != 1 or arr.size != w * h:
        raise DimensionMismatch(
            f"Buffer holds {arr.size} samples, expected {w}x{h} = {w * h}"
        )
    return arr, w, h


def floyd_steinberg(
    gray: np.ndarray | bytes | bytearray,
    width: int | None = None,
    height: int | None = None,
) -> np.ndarray:
    """Dither an 8-bit grayscale buffer to values in {0, 255}.

    Args:
        gray: 2D uint8 array, or a flat row-major buffer of width*height
              samples. Not modified.
        width: expected width. Inferred from a 2D array; defaults to the
               160 pixel target for flat buffers.
        height: expected height, same rules as width.

    Returns:
        (height, width) uint8 array where every sample is 0 or 255.

    Pixels are visited row by row, left to right. Each one is thresholded at
    128 and its error is pushed to the right (7/16), lower-left (3/16),
    below (5/16) and lower-right (1/16) neighbours, clamping each to 0-255.
    Error aimed past an edge is dropped.
    """
    samples, w, h = _as_samples(gray, width, height)

    # Plain ints: per-pixel numpy indexing is several times slower here.
    buf = np.clip(samples.astype(np.int32), BLACK, WHITE).tolist()

    for y in range(h):
        row = y * w
        has_next_row = y + 1 < h
        for x in range(w):
            i = row + x
            old = buf[i]
            new = BLACK if old < THRESHOLD else WHITE
            buf[i] = new
            err = old - new
            if err == 0:
                continue

            for dx, dy, weight in DIFFUSION:
                nx = x + dx
                if nx < 0 or nx >= w or (dy and not has_next_row):
                    continue
                j = i + dy * w + dx
                buf[j] = _clamp(buf[j] + _share(err, weight))

    return np.array(buf, dtype=np.uint8).reshape(h, w)
