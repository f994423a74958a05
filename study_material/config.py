"""Extraction configuration and named profiles.

Building Block: ExtractionConfig / load_config
    Input Data:  optional JSON config file, optional profile name
    Output Data: frozen ExtractionConfig consumed by extractor and renderer
    Setup Data:  PROFILES (default, upload, library), STUDY_MATERIAL_PROFILE env var

The profiles keep the thresholds that differ between the upload screen and
the library screen as named settings instead of separate code paths.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "STUDY_MATERIAL_PROFILE"
CHARSETS = ("unicode", "ascii")
RENDER_MODES = ("sequential", "speculative")


@dataclass(frozen=True)
class ExtractionConfig:
    """Limits and policies for one extraction call."""

    max_pages_text: int = 100
    max_pages_images: int = 5
    max_text_chars: int = 150_000
    render_scale: float = 1.5
    max_image_width: int | None = None
    jpeg_quality: int = 80
    min_text_threshold: int = 300
    charset: str = "unicode"
    filter_noise_lines: bool = True
    render_mode: str = "sequential"
    timeout_seconds: float | None = 60.0
    bytes_per_page_estimate: int = 3000
    max_file_bytes: int = 50 * 1024 * 1024

    def __post_init__(self) -> None:
        for name in ("max_pages_text", "max_pages_images", "max_text_chars",
                     "bytes_per_page_estimate"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.min_text_threshold < 0:
            raise ValueError("min_text_threshold must be >= 0")
        if self.render_scale <= 0:
            raise ValueError("render_scale must be > 0")
        if self.max_image_width is not None and self.max_image_width < 1:
            raise ValueError("max_image_width must be >= 1")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")
        if self.charset not in CHARSETS:
            raise ValueError(f"charset must be one of {CHARSETS}")
        if self.render_mode not in RENDER_MODES:
            raise ValueError(f"render_mode must be one of {RENDER_MODES}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    def with_overrides(self, **overrides) -> ExtractionConfig:
        return replace(self, **overrides)


PROFILES: dict[str, ExtractionConfig] = {
    "default": ExtractionConfig(),
    # Direct upload screen: smaller scan, strict ASCII cleaning
    "upload": ExtractionConfig(
        max_pages_text=50,
        max_pages_images=3,
        max_text_chars=80_000,
        min_text_threshold=300,
        charset="ascii",
    ),
    # Library books fetched from storage: width-capped renders for OCR
    "library": ExtractionConfig(
        max_pages_text=100,
        max_pages_images=3,
        max_text_chars=150_000,
        render_scale=2.0,
        max_image_width=1024,
        jpeg_quality=82,
        min_text_threshold=400,
    ),
}


def get_profile(name: str) -> ExtractionConfig:
    """Return a named profile. Raises KeyError if unknown."""
    if name not in PROFILES:
        available = ", ".join(sorted(PROFILES))
        raise KeyError(f"Unknown profile: '{name}'. Available: {available}")
    return PROFILES[name]


def load_config(path: Path | None = None,
                profile: str | None = None) -> ExtractionConfig:
    """Build a config from a profile plus optional JSON overrides.

    Profile resolution order: the ``profile`` argument, the ``"profile"``
    key in the file, the STUDY_MATERIAL_PROFILE env var, then "default".
    Every other key in the file must be an ExtractionConfig field.
    """
    overrides: dict = {}
    if path is not None:
        with open(path, encoding="utf-8") as f:
            overrides = json.load(f)
        if not isinstance(overrides, dict):
            raise ValueError(f"Config file must hold a JSON object: {path}")

    file_profile = overrides.pop("profile", None)
    name = profile or file_profile or os.environ.get(PROFILE_ENV_VAR) or "default"
    base = get_profile(name)

    known = {f.name for f in fields(ExtractionConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    logger.debug("Using profile %s with %d overrides", name, len(overrides))
    return base.with_overrides(**overrides) if overrides else base
