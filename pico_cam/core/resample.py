"""Scale-then-rotate resampling onto the fixed target grid.

The source is scaled to the pre-rotation extent (TARGET_HEIGHT wide,
TARGET_WIDTH tall) and then turned a quarter turn clockwise, which lands it
exactly on TARGET_WIDTH x TARGET_HEIGHT. Both steps are folded into one
affine matrix so the image is sampled only once.
"""

from __future__ import annotations

import cv2
import numpy as np

from pico_cam.core.errors import InvalidInput
from pico_cam.core.frame import TARGET_HEIGHT, TARGET_WIDTH, RawFrame


def _inverse_transform(
    src_width: int, src_height: int, dst_width: int, dst_height: int
) -> np.ndarray:
    """Destination → source matrix for scale followed by a clockwise turn.

    Pixel centers are aligned (the +/-0.5 terms), so a source that already
    has the pre-rotation size maps onto integer coordinates and is copied
    exactly.
    """
    # Pre-rotation extent: the turn swaps the axes.
    scaled_w, scaled_h = dst_height, dst_width
    sx = scaled_w / src_width
    sy = scaled_h / src_height

    # Clockwise turn of the scaled image: x' = (scaled_h - 1) - v, y' = u.
    # Inverting that and the scale gives source coordinates directly.
    return np.array(
        [
            [0.0, 1.0 / sx, 0.5 / sx - 0.5],
            [-1.0 / sy, 0.0, (scaled_h - 0.5) / sy - 0.5],
        ],
        dtype=np.float64,
    )


def resample(
    frame: RawFrame,
    width: int = TARGET_WIDTH,
    height: int = TARGET_HEIGHT,
) -> np.ndarray:
    """Resample a frame to (height, width, 4), rotated a quarter turn clockwise.

    Channel order is preserved. Bilinear interpolation, edge pixels
    replicated so borders never darken.
    """
    if frame.width <= 0 or frame.height <= 0:
        raise InvalidInput(
            f"Frame dimensions must be positive, got {frame.width}x{frame.height}"
        )
    src = frame.to_array()
    matrix = _inverse_transform(frame.width, frame.height, width, height)
    return cv2.warpAffine(
        src,
        matrix,
        (width, height),
        flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
        borderMode=cv2.BORDER_REPLICATE,
    )
