"""Tests for Floyd-Steinberg dithering."""

import numpy as np
import pytest

from pico_cam.core.dither import floyd_steinberg
from pico_cam.core.errors import DimensionMismatch


def _reference_dither(gray: np.ndarray) -> np.ndarray:
    """Direct transcription of the scan: int() truncates err*w/16 toward zero."""
    img = gray.astype(np.int64).copy()
    h, w = img.shape
    for y in range(h):
        for x in range(w):
            old = int(img[y, x])
            new = 0 if old < 128 else 255
            img[y, x] = new
            err = old - new
            for dx, dy, weight in ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)):
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and ny < h:
                    img[ny, nx] = min(255, max(0, int(img[ny, nx]) + int(err * weight / 16)))
    return img.astype(np.uint8)


class TestFloydSteinberg:
    def test_output_only_black_and_white(self):
        rng = np.random.default_rng(7)
        gray = rng.integers(0, 256, size=(120, 160), dtype=np.uint8)
        result = floyd_steinberg(gray)
        assert set(np.unique(result)) <= {0, 255}

    def test_preserves_shape(self):
        gray = np.full((15, 20), 90, dtype=np.uint8)
        result = floyd_steinberg(gray)
        assert result.shape == (15, 20)
        assert result.dtype == np.uint8

    def test_all_black_stays_black(self):
        gray = np.zeros((5, 5), dtype=np.uint8)
        assert np.array_equal(floyd_steinberg(gray), gray)

    def test_all_white_stays_white(self):
        gray = np.full((5, 5), 255, dtype=np.uint8)
        assert np.array_equal(floyd_steinberg(gray), gray)

    def test_input_not_modified(self):
        gray = np.full((4, 4), 100, dtype=np.uint8)
        before = gray.copy()
        floyd_steinberg(gray)
        assert np.array_equal(gray, before)

    def test_deterministic(self):
        rng = np.random.default_rng(3)
        gray = rng.integers(0, 256, size=(120, 160), dtype=np.uint8)
        assert np.array_equal(floyd_steinberg(gray), floyd_steinberg(gray))


class TestMidGrayField:
    @pytest.fixture
    def field(self):
        return np.full((120, 160), 127, dtype=np.uint8)

    def test_matches_reference_scan(self, field):
        assert np.array_equal(floyd_steinberg(field), _reference_dither(field))

    def test_first_row_pattern(self, field):
        # 127 → 0 (err 127, +55 right), 182 → 255 (err -73, -31 right), ...
        result = floyd_steinberg(field)
        assert result[0, :5].tolist() == [0, 255, 0, 255, 0]

    def test_mixture_of_black_and_white(self, field):
        result = floyd_steinberg(field)
        black = np.count_nonzero(result == 0) / result.size
        assert 0.35 < black < 0.65
        assert np.count_nonzero(result == 255) > 0

    def test_random_field_matches_reference(self):
        rng = np.random.default_rng(11)
        gray = rng.integers(0, 256, size=(24, 32), dtype=np.uint8)
        assert np.array_equal(floyd_steinberg(gray), _reference_dither(gray))


class TestArithmetic:
    def test_negative_error_truncates_toward_zero(self):
        # 200 → 255, err -55: -385 / 16 truncates to -24, so 152 → 128 → white.
        # Flooring (-25) would give 127 → black.
        gray = np.array([[200, 152]], dtype=np.uint8)
        assert floyd_steinberg(gray).tolist() == [[255, 255]]

    def test_each_step_clamps(self):
        # 250 + 55 clamps to 255, leaving no error to push onto the 110.
        gray = np.array([[127, 250, 110]], dtype=np.uint8)
        assert floyd_steinberg(gray).tolist() == [[0, 255, 0]]

    def test_positive_error_pushes_neighbour_over_threshold(self):
        # 100 → 0, err 100: 100 * 7 / 16 = 43, so 90 → 133 → white.
        gray = np.array([[100, 90]], dtype=np.uint8)
        assert floyd_steinberg(gray).tolist() == [[0, 255]]


class TestEdges:
    def test_last_pixel_error_discarded(self):
        gray = np.zeros((120, 160), dtype=np.uint8)
        gray[119, 159] = 100
        result = floyd_steinberg(gray)
        assert not result.any()

    def test_last_pixel_above_threshold(self):
        gray = np.zeros((120, 160), dtype=np.uint8)
        gray[119, 159] = 200
        result = floyd_steinberg(gray)
        assert result[119, 159] == 255
        assert np.count_nonzero(result) == 1

    def test_right_edge_does_not_wrap(self):
        # Wrapping 100 * 7 / 16 = 43 onto (0, 1) would lift 120 to 163.
        gray = np.zeros((4, 8), dtype=np.uint8)
        gray[0, 7] = 100
        gray[1, 0] = 120
        result = floyd_steinberg(gray)
        assert not result.any()

    def test_checkerboard_unchanged(self):
        yy, xx = np.mgrid[0:120, 0:160]
        board = np.where(((yy // 2) + (xx // 2)) % 2 == 0, 0, 255).astype(np.uint8)
        assert np.array_equal(floyd_steinberg(board), board)


class TestBufferShapes:
    def test_flat_buffer_uses_target_size(self):
        flat = np.full(160 * 120, 30, dtype=np.uint8)
        result = floyd_steinberg(flat)
        assert result.shape == (120, 160)

    def test_bytes_buffer(self):
        result = floyd_steinberg(bytes(160 * 120))
        assert result.shape == (120, 160)
        assert not result.any()

    def test_flat_buffer_explicit_dims(self):
        result = floyd_steinberg(np.zeros(12, dtype=np.uint8), width=4, height=3)
        assert result.shape == (3, 4)

    def test_flat_buffer_wrong_length(self):
        with pytest.raises(DimensionMismatch):
            floyd_steinberg(np.zeros(100, dtype=np.uint8))

    def test_array_disagrees_with_stated_dims(self):
        with pytest.raises(DimensionMismatch):
            floyd_steinberg(np.zeros((10, 10), dtype=np.uint8), width=160, height=120)
