"""Live camera capture and the frame processing loop.

The capture device discards late frames itself (buffer size 1); the loop
processes whatever it is handed and publishes each result into a
LatestSlot for the display to pick up.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Iterator

import cv2

from pico_cam.core.errors import PipelineError
from pico_cam.core.frame import ChannelOrder, MonochromeBitmap, RawFrame
from pico_cam.core.pipeline import process_raw
from pico_cam.utils.slot import LatestSlot

logger = logging.getLogger(__name__)


class CameraSource:
    """OpenCV webcam wrapper yielding BGRA RawFrames."""

    def __init__(self, index: int = 0, capture_factory=cv2.VideoCapture) -> None:
        self.index = index
        self._capture_factory = capture_factory
        self._cap = None

    def open(self) -> None:
        if self._cap is not None and self._cap.isOpened():
            return
        cap = self._capture_factory(self.index)
        if not cap.isOpened():
            cap.release()
            raise IOError(f"Cannot open camera {self.index}")
        # Keep only the newest frame queued so slow processing never lags.
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        self._cap = cap
        logger.info("Camera %d opened", self.index)

    def read(self) -> RawFrame | None:
        """Grab one frame, or None if the device returned nothing."""
        self.open()
        ret, bgr = self._cap.read()
        if not ret or bgr is None:
            logger.debug("Camera %d: frame grab failed", self.index)
            return None
        return RawFrame.from_array(bgr, ChannelOrder.BGRA)

    def frames(self, max_misses: int = 30) -> Iterator[RawFrame]:
        """Yield frames until the device stops delivering.

        Individual failed grabs are skipped; the stream ends only after
        ``max_misses`` failures in a row.
        """
        misses = 0
        while True:
            raw = self.read()
            if raw is None:
                misses += 1
                if misses >= max_misses:
                    logger.warning(
                        "Camera %d: %d consecutive grab failures, stopping",
                        self.index,
                        misses,
                    )
                    return
                continue
            misses = 0
            yield raw

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera %d released", self.index)

    def __enter__(self) -> CameraSource:
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def run_capture(
    frames: Iterable[RawFrame],
    slot: LatestSlot[MonochromeBitmap],
    should_stop: Callable[[], bool] = lambda: False,
    on_error: Callable[[PipelineError], None] | None = None,
) -> int:
    """Process frames into the slot until stopped or the source runs dry.

    Frames the pipeline rejects are logged and dropped; the next frame is
    processed as usual. Returns the number of bitmaps published.
    """
    published = 0
    for raw in frames:
        if should_stop():
            break
        try:
            bitmap = process_raw(raw)
        except PipelineError as e:
            logger.warning("Dropping frame: %s", e)
            if on_error:
                on_error(e)
            continue
        slot.put(bitmap)
        published += 1
    logger.debug("Capture loop finished after %d frames", published)
    return published


def capture_single(
    source: CameraSource, attempts: int = 10, delay_s: float = 0.05
) -> MonochromeBitmap:
    """Capture and process one frame, retrying empty or rejected grabs."""
    for _ in range(attempts):
        raw = source.read()
        if raw is not None:
            try:
                return process_raw(raw)
            except PipelineError as e:
                logger.warning("Dropping frame: %s", e)
        time.sleep(delay_s)
    raise IOError(f"No usable frame from camera {source.index} after {attempts} attempts")
