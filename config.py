"""
Central configuration for the wireframe globe generator.
All core constants and environment-driven settings live here.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    # ── Geometry ────────────────────────────────────────────────────
    SPHERE_RADIUS: float = 2.0
    RING_RADIAL_SEGMENTS: int = 16
    RING_TUBULAR_SEGMENTS: int = 100
    RING_TWIST: float = math.pi / 4

    # ── Connections ─────────────────────────────────────────────────
    CONNECTION_TOLERANCE: float = 0.1
    SCALE_TOLERANCE_WITH_RESOLUTION: bool = False
    REFERENCE_SEGMENTS: int = 24  # resolution the tolerance was tuned at
    CONNECTION_COLOR: str = "#FFFFFF"

    # ── Rings ───────────────────────────────────────────────────────
    RING_COLOR: str = "#FFFFFF"

    # ── Preview camera ──────────────────────────────────────────────
    PREVIEW_WIDTH: int = 800
    PREVIEW_HEIGHT: int = 800
    PREVIEW_CAMERA_DISTANCE: float = 5.0
    FIELD_OF_VIEW: float = 45.0

    # ── Export ──────────────────────────────────────────────────────
    EXPORT_RESOLUTION: int = 2048
    EXPORT_MARGIN: float = 1.1
    BACKGROUND_COLOR: str = "#000000"
    EXPORT_FILENAME_PREFIX: str = "globe"
    SURFACE_LOCK_TIMEOUT: float = 10.0
    RENDER_TIMEOUT_MS: int = 30000

    # ── Logging ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Paths ───────────────────────────────────────────────────────
    PROJECT_ROOT: Path = Path(__file__).parent
    EXPORTS_DIR: Optional[Path] = None

    @model_validator(mode="after")
    def _set_default_paths(self) -> Settings:
        if self.EXPORTS_DIR is None:
            self.EXPORTS_DIR = self.PROJECT_ROOT / "exports"
        self.EXPORTS_DIR.mkdir(parents=True, exist_ok=True)
        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton instance
settings = Settings()
