"""
Drawing surface backed by Pillow.

The renderer only talks to the small :class:`DrawingSurface` protocol, so a
different rasteriser can be dropped in without touching the scheduler.
Rotations are in radians, clockwise on screen (y grows downwards).
"""

from __future__ import annotations

import io
import logging
import math
from functools import lru_cache
from typing import Protocol, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

LOG = logging.getLogger(__name__)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


class DrawingSurface(Protocol):
    @property
    def size(self) -> Tuple[int, int]: ...

    def clear(self, color: str | None = None) -> None: ...

    def set_global_alpha(self, alpha: float) -> None: ...

    def draw_text(self, text: str, x: float, y: float, font: FontType, color: str, rotation: float = 0.0) -> None: ...

    def draw_image(
        self, image: Image.Image, x: float, y: float, w: float, h: float, rotation: float = 0.0
    ) -> None: ...

    def draw_rounded_rect(
        self, x: float, y: float, w: float, h: float, radius: float, color: str, rotation: float = 0.0
    ) -> None: ...

    def to_jpeg(self, quality: int = 70) -> bytes: ...


@lru_cache(maxsize=64)
def load_font(family: str, size: int) -> FontType:
    """
    Load ``family`` at ``size`` pixels, falling back to Pillow's bundled
    scalable font when the family cannot be located.
    """

    size = max(1, int(size))
    for candidate in (family, f"{family}.ttf", f"{family.lower()}.ttf"):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    LOG.debug("Font family %r not found; using the default font", family)
    return ImageFont.load_default(size=size)


def measure_text(text: str, font_size: float = 48, font_family: str = "Arial") -> float:
    """Advance width of ``text`` in pixels."""

    return float(load_font(font_family, round(font_size)).getlength(text))


def _rotate_about(layer: Image.Image, pivot: Tuple[float, float], rotation: float) -> Tuple[Image.Image, Tuple[float, float]]:
    """
    Rotate ``layer`` around ``pivot`` (layer coordinates).

    Returns the expanded layer and where the pivot ended up inside it.
    """

    if not rotation:
        return layer, pivot
    cx, cy = layer.width / 2, layer.height / 2
    vx, vy = pivot[0] - cx, pivot[1] - cy
    cos_r, sin_r = math.cos(rotation), math.sin(rotation)
    rotated = layer.rotate(-math.degrees(rotation), resample=Image.Resampling.BICUBIC, expand=True)
    new_pivot = (
        rotated.width / 2 + vx * cos_r - vy * sin_r,
        rotated.height / 2 + vx * sin_r + vy * cos_r,
    )
    return rotated, new_pivot


class PillowSurface:
    """RGBA raster the renderer paints each frame onto."""

    def __init__(self, width: int, height: int, background: str = "black") -> None:
        self.background = background
        self.image = Image.new("RGBA", (int(width), int(height)), background)
        self._alpha = 1.0

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def clear(self, color: str | None = None) -> None:
        self.image = Image.new("RGBA", self.image.size, color or self.background)
        self._alpha = 1.0

    def set_global_alpha(self, alpha: float) -> None:
        self._alpha = max(0.0, min(1.0, float(alpha)))

    # ------------------------------------------------------------------ drawing

    def draw_text(self, text: str, x: float, y: float, font: FontType, color: str, rotation: float = 0.0) -> None:
        """Draw ``text`` horizontally centred on ``x`` with its baseline at ``y``."""

        if not text:
            return
        left, top, right, bottom = font.getbbox(text, anchor="ms")
        width, height = int(math.ceil(right - left)) + 2, int(math.ceil(bottom - top)) + 2
        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        pivot = (1 - left, 1 - top)
        ImageDraw.Draw(layer).text(pivot, text, font=font, fill=color, anchor="ms")
        self._place(layer, pivot, (x, y), rotation)

    def draw_image(
        self, image: Image.Image, x: float, y: float, w: float, h: float, rotation: float = 0.0
    ) -> None:
        """Draw ``image`` into the box ``(x, y, w, h)``; negative sizes mirror."""

        width, height = abs(int(round(w))), abs(int(round(h)))
        if width == 0 or height == 0:
            return
        layer = image.convert("RGBA").resize((width, height), Image.Resampling.BILINEAR)
        if w < 0:
            layer = ImageOps.mirror(layer)
        if h < 0:
            layer = ImageOps.flip(layer)
        self._place(layer, (width / 2, height / 2), (x + w / 2, y + h / 2), rotation)

    def draw_rounded_rect(
        self, x: float, y: float, w: float, h: float, radius: float, color: str, rotation: float = 0.0
    ) -> None:
        width, height = abs(int(round(w))), abs(int(round(h)))
        if width == 0 or height == 0:
            return
        radius = max(0.0, min(float(radius), width / 2, height / 2))
        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(layer).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=color)
        self._place(layer, (width / 2, height / 2), (x + w / 2, y + h / 2), rotation)

    def to_jpeg(self, quality: int = 70) -> bytes:
        buffer = io.BytesIO()
        self.image.convert("RGB").save(buffer, format="JPEG", quality=int(quality))
        return buffer.getvalue()

    # ------------------------------------------------------------------ internals

    def _place(
        self,
        layer: Image.Image,
        pivot: Tuple[float, float],
        target: Tuple[float, float],
        rotation: float,
    ) -> None:
        layer, pivot = _rotate_about(layer, pivot, rotation)
        if self._alpha < 1.0:
            alpha = self._alpha
            layer.putalpha(layer.getchannel("A").point(lambda value: int(round(value * alpha))))
        self._composite(layer, target[0] - pivot[0], target[1] - pivot[1])

    def _composite(self, layer: Image.Image, left: float, top: float) -> None:
        # Image.alpha_composite rejects negative destinations, so clip by hand.
        lx, ly = int(round(left)), int(round(top))
        sx, sy = max(0, -lx), max(0, -ly)
        dx, dy = max(0, lx), max(0, ly)
        width = min(layer.width - sx, self.image.width - dx)
        height = min(layer.height - sy, self.image.height - dy)
        if width <= 0 or height <= 0:
            return
        self.image.alpha_composite(layer.crop((sx, sy, sx + width, sy + height)), dest=(dx, dy))
