"""NTSC luma conversion for packed 4-channel buffers."""

from __future__ import annotations

import numpy as np

from pico_cam.core.errors import DimensionMismatch
from pico_cam.core.frame import CHANNELS, ChannelOrder

# 0.3 R + 0.59 G + 0.11 B, as integer percentages.
R_WEIGHT = 30
G_WEIGHT = 59
B_WEIGHT = 11


def to_grayscale(
    color: np.ndarray, channel_order: ChannelOrder = ChannelOrder.BGRA
) -> np.ndarray:
    """Convert a (height, width, 4) uint8 buffer to (height, width) uint8 gray.

    Truncates toward zero. The weighted sum is done in integers and divided
    by 100 once, so e.g. (100, 150, 200) gives exactly 140. Alpha is ignored.
    """
    if color.ndim != 3 or color.shape[2] != CHANNELS:
        raise DimensionMismatch(
            f"Expected a (height, width, {CHANNELS}) buffer, got {color.shape}"
        )

    ri, gi, bi = channel_order.rgb_indices
    wide = color.astype(np.uint32)
    total = (
        R_WEIGHT * wide[:, :, ri]
        + G_WEIGHT * wide[:, :, gi]
        + B_WEIGHT * wide[:, :, bi]
    )
    return np.clip(total // 100, 0, 255).astype(np.uint8)
