"""
Batch renderer.

Drives the :class:`~sceneloom.scheduler.Scheduler` tick by tick, rasterises
the ticks that fall inside the render window and writes them out as
sequentially numbered JPEG files.  Ticks outside the window are still
stepped, so animation timing never depends on the window.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .api.state import PreviewCache
from .config import Canvas, RenderSettings
from .errors import RenderOutputError, SceneError
from .objects import Box, Frame, Image, RenderObject, Text, Video
from .primitives import Coroutine
from .scheduler import Scheduler
from .surface import DrawingSurface, PillowSurface, load_font
from .utils.progress import format_progress

LOG = logging.getLogger(__name__)

FRAME_TEMPLATE = "frame{:05d}.jpeg"
FRAME_GLOB = "frame*.jpeg"
MIN_VISIBLE_OPACITY = 1 / 100


@dataclass
class RenderResult:
    tick_count: int
    out_dir: Path
    frames: List[Path] = field(default_factory=list)
    first_frame: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "tickCount": int(self.tick_count),
            "outDir": str(self.out_dir),
            "frames": len(self.frames),
            "firstFrame": self.first_frame,
        }


def _off_canvas(obj: RenderObject, canvas: Canvas) -> bool:
    left = min(obj.x, obj.x + obj.w)  # type: ignore[attr-defined]
    top = min(obj.y, obj.y + obj.h)  # type: ignore[attr-defined]
    right = max(obj.x, obj.x + obj.w)  # type: ignore[attr-defined]
    bottom = max(obj.y, obj.y + obj.h)  # type: ignore[attr-defined]
    return left > canvas.width or top > canvas.height or right < 0 or bottom < 0


def _draw_text(surface: DrawingSurface, obj: Text, canvas: Canvas) -> None:
    font = load_font(obj.font_family, round(obj.font_size_px))
    surface.draw_text(obj.content, obj.x, obj.y, font, obj.color, obj.rotation)


def _draw_image(surface: DrawingSurface, obj: Image, canvas: Canvas) -> None:
    if _off_canvas(obj, canvas):
        return
    surface.draw_image(obj.decoded, obj.x, obj.y, obj.w, obj.h, obj.rotation)


def _draw_video(surface: DrawingSurface, obj: Video, canvas: Canvas) -> None:
    if _off_canvas(obj, canvas):
        return
    surface.draw_image(obj.load_frame(), obj.x, obj.y, obj.w, obj.h, obj.rotation)


def _draw_box(surface: DrawingSurface, obj: Box, canvas: Canvas) -> None:
    surface.draw_rounded_rect(obj.x, obj.y, obj.w, obj.h, obj.radius, obj.color, obj.rotation)


DRAWERS: Dict[str, Callable[[DrawingSurface, RenderObject, Canvas], None]] = {
    Text.type: _draw_text,  # type: ignore[dict-item]
    Image.type: _draw_image,  # type: ignore[dict-item]
    Video.type: _draw_video,  # type: ignore[dict-item]
    Box.type: _draw_box,  # type: ignore[dict-item]
}


def draw_frame(surface: DrawingSurface, frame: Iterable[RenderObject], canvas: Canvas) -> int:
    """
    Paint ``frame`` onto ``surface`` in order.  Returns how many objects
    were actually drawn.
    """

    drawn = 0
    for obj in frame:
        if obj.opacity < MIN_VISIBLE_OPACITY:
            continue
        drawer = DRAWERS.get(obj.type)
        if drawer is None:
            raise SceneError(f"no drawer registered for object type '{obj.type}'")
        surface.set_global_alpha(obj.opacity)
        drawer(surface, obj, canvas)
        drawn += 1
    surface.set_global_alpha(1.0)
    return drawn


class Renderer:
    """
    Render a list of scene generators to numbered frames on disk.
    """

    def __init__(
        self,
        settings: Optional[RenderSettings] = None,
        *,
        surface: Optional[DrawingSurface] = None,
        previews: Optional[PreviewCache] = None,
    ) -> None:
        self.settings = settings or RenderSettings()
        self.canvas = self.settings.canvas()
        self.out_dir = Path(self.settings.out_dir)
        self.surface: DrawingSurface = surface or PillowSurface(
            self.canvas.width, self.canvas.height, background=self.settings.background
        )
        if previews is None and self.settings.cache_previews:
            previews = PreviewCache(self.out_dir / "previews")
        self.previews = previews

    # ------------------------------------------------------------------ output

    def prepare_output(self) -> None:
        """Create the output directory and remove frames from earlier runs."""

        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            for stale in self.out_dir.glob(FRAME_GLOB):
                stale.unlink()
        except OSError as exc:
            raise RenderOutputError(f"cannot prepare output directory {self.out_dir}: {exc}") from exc
        if self.previews is not None:
            self.previews.clear()

    def frame_path(self, tick: int) -> Path:
        return self.out_dir / FRAME_TEMPLATE.format(tick)

    def _persist(self, tick: int, image: bytes) -> Path:
        path = self.frame_path(tick)
        try:
            path.write_bytes(image)
        except OSError as exc:
            raise RenderOutputError(f"cannot write frame {path}: {exc}") from exc
        return path

    # ------------------------------------------------------------------ rendering

    def render_frame(self, frame: Frame) -> bytes:
        self.surface.clear(self.settings.background)
        draw_frame(self.surface, frame, self.canvas)
        return self.surface.to_jpeg(self.settings.jpeg_quality)

    def render(self, scenes: Iterable[Coroutine]) -> RenderResult:
        """
        Step ``scenes`` to completion, writing every in-window tick.

        Returns the total tick count across all scenes together with the
        frames written.
        """

        settings = self.settings
        random.seed(settings.seed)
        self.prepare_output()

        scheduler = Scheduler(scenes)
        result = RenderResult(tick_count=0, out_dir=self.out_dir)
        last_image: Optional[bytes] = None
        last_tick = 0

        for state in scheduler.ticks():
            if settings.in_window(state.tick):
                image = self.render_frame(state.frame)
                result.frames.append(self._persist(state.tick, image))
                if result.first_frame is None:
                    result.first_frame = state.tick
                last_image = image
                last_tick = state.tick
                LOG.info(
                    format_progress(
                        state.tick,
                        objects=len(state.frame),
                        running=state.running,
                        length_hint=settings.length_hint,
                    )
                )
            elif LOG.isEnabledFor(logging.DEBUG):
                LOG.debug(
                    format_progress(
                        state.tick,
                        objects=len(state.frame),
                        running=state.running,
                        length_hint=settings.length_hint,
                        skipped=True,
                    )
                )

            if state.scene_finished:
                if self.previews is not None and last_image is not None:
                    self.previews.store(state.scene_index, state.scene_name, last_tick, last_image)
                last_image = None

        result.tick_count = scheduler.tick
        LOG.info("Rendered %d of %d ticks into %s", len(result.frames), result.tick_count, self.out_dir)
        return result
