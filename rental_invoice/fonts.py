"""Font discovery for the raster invoice renderer."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional, Union

from PIL import ImageFont

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

BUNDLED_REGULAR = os.path.join(_PROJECT_ROOT, "fonts", "DejaVuSans.ttf")
BUNDLED_BOLD = os.path.join(_PROJECT_ROOT, "fonts", "DejaVuSans-Bold.ttf")
SYSTEM_REGULAR_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/DejaVuSans.ttf",
]
SYSTEM_BOLD_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/Library/Fonts/DejaVuSans-Bold.ttf",
]


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


@lru_cache(maxsize=None)
def _regular_path() -> Optional[str]:
    return find_font_path("INVOICE_FONT_PATH", [BUNDLED_REGULAR, *SYSTEM_REGULAR_CANDIDATES])


@lru_cache(maxsize=None)
def _bold_path() -> Optional[str]:
    return find_font_path("INVOICE_FONT_BOLD_PATH", [BUNDLED_BOLD, *SYSTEM_BOLD_CANDIDATES])


@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False) -> Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]:
    """Return a TrueType font, falling back to Pillow's built-in font when none is installed."""
    path = (_bold_path() or _regular_path()) if bold else _regular_path()
    if path is None:
        return ImageFont.load_default(size=size)
    return ImageFont.truetype(path, size)
