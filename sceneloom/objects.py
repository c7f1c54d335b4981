"""
Render object model.

Plain mutable records describing one drawable thing.  Scenes create them
once, hand the list to the scheduler, and coroutines then mutate fields in
place every tick; nothing here is private.
"""

from __future__ import annotations

import math
import re
from collections import OrderedDict
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import ClassVar, Iterable, Tuple, Union

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from .errors import AssetNotFoundError, MissingPropertyError
from .utils.assets import resolve_asset

VIDEO_FRAME_CACHE_SIZE = 8

_FONT_SIZE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$", re.IGNORECASE)


def _decode(path: Path) -> PILImage.Image:
    try:
        with PILImage.open(path) as handle:
            handle.load()
            return handle.convert("RGBA")
    except FileNotFoundError as exc:
        raise AssetNotFoundError(path) from exc
    except UnidentifiedImageError as exc:
        raise AssetNotFoundError(path) from exc


@dataclass(eq=False)
class RenderObject:
    """Fields shared by every drawable."""

    type: ClassVar[str] = "object"

    rotation: float = field(default=0.0, kw_only=True)
    opacity: float = field(default=1.0, kw_only=True)


@dataclass(eq=False)
class Text(RenderObject):
    type: ClassVar[str] = "text"

    content: str
    x: float
    y: float
    font_size: Union[str, float] = "48px"
    font_family: str = "Arial"
    color: str = "white"

    @property
    def font_size_px(self) -> float:
        if isinstance(self.font_size, (int, float)):
            return float(self.font_size)
        match = _FONT_SIZE_RE.match(str(self.font_size))
        if not match:
            raise ValueError(f"Unsupported font size '{self.font_size}'")
        return float(match.group(1))


@dataclass(eq=False)
class Image(RenderObject):
    """
    A still image drawn into ``(x, y, w, h)``.

    The file is decoded when the object is constructed, so a missing asset
    fails the scene up front instead of producing blank frames later.
    Negative ``w``/``h`` mirror the image.
    """

    type: ClassVar[str] = "image"

    source_path: str
    x: float
    y: float
    w: float
    h: float
    decoded: PILImage.Image = field(init=False, repr=False)
    resolved_path: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.resolved_path = resolve_asset(self.source_path)
        self.decoded = _decode(self.resolved_path)


@dataclass(eq=False)
class Video(RenderObject):
    """
    A clip drawn from a folder of pre-rendered frames
    (``frame00001.jpeg``, ``frame00002.jpeg`` ...).

    ``current_time`` is usually tweened by the scene; the frame shown is
    derived from it on every draw.
    """

    type: ClassVar[str] = "video"

    source_folder: str
    x: float
    y: float
    w: float
    h: float
    framerate: float = 60
    current_time: float = 0.0
    frame_extension: str = "jpeg"
    _frames: "OrderedDict[int, PILImage.Image]" = field(
        init=False, repr=False, default_factory=OrderedDict
    )

    @property
    def frame_index(self) -> int:
        return math.floor(self.current_time / 60 * self.framerate) + 1

    def frame_path(self, index: int | None = None) -> Path:
        if index is None:
            index = self.frame_index
        extension = self.frame_extension.lstrip(".")
        return resolve_asset(self.source_folder) / f"frame{index:05d}.{extension}"

    def load_frame(self) -> PILImage.Image:
        """Synchronously decode the frame for the current time."""

        index = self.frame_index
        cached = self._frames.get(index)
        if cached is not None:
            self._frames.move_to_end(index)
            return cached
        frame = _decode(self.frame_path(index))
        self._frames[index] = frame
        while len(self._frames) > VIDEO_FRAME_CACHE_SIZE:
            self._frames.popitem(last=False)
        return frame


@dataclass(eq=False)
class Box(RenderObject):
    """Solid rectangle with optional rounded corners."""

    type: ClassVar[str] = "box"

    color: str
    x: float
    y: float
    w: float
    h: float
    radius: float = 0.0


Frame = Tuple[RenderObject, ...]


def has_property(target: object, name: str) -> bool:
    if is_dataclass(target):
        return any(f.name == name for f in fields(target)) and not name.startswith("_")
    return hasattr(target, name)


def require_properties(target: object, names: Iterable[str]) -> None:
    for name in names:
        if not has_property(target, name):
            raise MissingPropertyError(target, name)


def has_size(target: object) -> bool:
    return has_property(target, "w") and has_property(target, "h")
