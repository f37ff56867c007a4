"""Text renderings of dithered bitmaps for terminal display.

White pixels are drawn (raised braille dots / filled blocks), black pixels
are left blank, which reads correctly on a dark terminal background.
"""

from __future__ import annotations

import numpy as np

from pico_cam.core.frame import MonochromeBitmap

# --- Braille encoding ---
# Braille characters use a 2-wide x 4-tall dot grid per character.
# Unicode braille block starts at U+2800.
# Dot positions (col 0, col 1):
#   row 0: bit 0, bit 3
#   row 1: bit 1, bit 4
#   row 2: bit 2, bit 5
#   row 3: bit 6, bit 7

BRAILLE_BASE = 0x2800

# Bit positions for each (row, col) in the 4x2 grid
BRAILLE_DOT_BITS: list[list[int]] = [
    [0, 3],  # row 0
    [1, 4],  # row 1
    [2, 5],  # row 2
    [6, 7],  # row 3
]

# (top, bottom) pixel pair → half-block character
HALF_BLOCKS = {
    (False, False): " ",
    (True, False): "▀",
    (False, True): "▄",
    (True, True): "█",
}


def braille_char(dots: np.ndarray) -> str:
    """Convert a 4x2 boolean array to a single braille character.

    Args:
        dots: shape (4, 2) boolean array where True = raised dot.
    """
    code = 0
    for row in range(4):
        for col in range(2):
            if dots[row, col]:
                code |= 1 << BRAILLE_DOT_BITS[row][col]
    return chr(BRAILLE_BASE + code)


def braille_from_array(binary: np.ndarray) -> list[str]:
    """Convert a 2D binary array to braille lines.

    Values > 0 are raised dots. Dimensions that are not multiples of 4
    (height) and 2 (width) are padded with blanks.
    """
    binary = np.asarray(binary) > 0
    h, w = binary.shape
    pad_h = (4 - h % 4) % 4
    pad_w = (2 - w % 2) % 2
    if pad_h or pad_w:
        binary = np.pad(binary, ((0, pad_h), (0, pad_w)), constant_values=False)
        h, w = binary.shape

    lines = []
    for y in range(0, h, 4):
        line_chars = []
        for x in range(0, w, 2):
            block = binary[y : y + 4, x : x + 2]
            line_chars.append(braille_char(block))
        lines.append("".join(line_chars))
    return lines


def braille_from_bitmap(bitmap: MonochromeBitmap) -> list[str]:
    """160x120 bitmap → 30 lines of 80 braille cells."""
    return braille_from_array(bitmap.pixels)


def blocks_from_bitmap(bitmap: MonochromeBitmap) -> list[str]:
    """Render two pixel rows per line with half-block characters."""
    on = bitmap.pixels > 0
    if on.shape[0] % 2:
        on = np.pad(on, ((0, 1), (0, 0)), constant_values=False)

    lines = []
    for y in range(0, on.shape[0], 2):
        top, bottom = on[y], on[y + 1]
        lines.append(
            "".join(HALF_BLOCKS[(bool(t), bool(b))] for t, b in zip(top, bottom))
        )
    return lines
