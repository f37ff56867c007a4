"""User-facing settings for capture and saving.

The pipeline itself has no knobs; these only steer where frames come from
and how snapshots are written.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

ENV_CAMERA = "PICO_CAM_CAMERA"
ENV_SAVE_DIR = "PICO_CAM_SAVE_DIR"


def _env_camera_index() -> int:
    raw = os.getenv(ENV_CAMERA, "0")
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_CAMERA} must be an integer, got {raw!r}") from None


def _env_save_dir() -> Path:
    return Path(os.getenv(ENV_SAVE_DIR, ".")).expanduser()


@dataclass(frozen=True)
class Settings:
    """Capture and output settings."""

    camera_index: int = field(default_factory=_env_camera_index)
    scale: int = 1  # Nearest-neighbour upscale factor for saved images
    save_dir: Path = field(default_factory=_env_save_dir)
    fps: float = 30.0  # UI polling rate

    def __post_init__(self) -> None:
        if self.scale < 1:
            raise ValueError(f"scale must be >= 1, got {self.scale}")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")

    def with_overrides(self, **overrides) -> Settings:
        """Copy with the given fields replaced, skipping None values."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
