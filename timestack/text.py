from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from typing import Protocol

from PIL import ImageFont


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 12.0


class TextMeasurer(Protocol):
    """Rendered-width capability of the active label font.

    `font` identifies the font; label-width caches are keyed by it.
    """

    @property
    def font(self) -> str: ...

    def measure(self, text: str) -> float: ...


@dataclass(frozen=True)
class PillowTextMeasurer:
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_px: float = DEFAULT_FONT_SIZE_PX

    def __post_init__(self) -> None:
        if not self.font_family.strip():
            raise ValueError("font_family must be non-empty")
        if self.font_size_px <= 0:
            raise ValueError("font_size_px must be > 0")

    @property
    def font(self) -> str:
        return f"{self.font_size_px:g}px {self.font_family}"

    def measure(self, text: str) -> float:
        return float(text_width(text, font_family=self.font_family, font_size_px=self.font_size_px))


def text_width(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> int:
    if not text:
        return 0
    font = _load_font(font_family=font_family, font_size_px=font_size_px)
    left, _top, right, _bottom = font.getbbox(text)
    return max(0, int(right - left))


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    for name in _font_file_names(font_family):
        # truetype() also searches the platform font directories for a bare file name.
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    LOGGER.debug("no font file found for %r; using Pillow's default font", font_family)
    return ImageFont.load_default(size=size)


def _font_file_names(font_family: str) -> tuple[str, ...]:
    stem = font_family.strip().replace(" ", "")
    return (stem, f"{stem}-Regular")
