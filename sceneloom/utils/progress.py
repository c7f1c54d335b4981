"""Textual progress reporting for the render loop."""

from __future__ import annotations

from typing import Optional

FILLED = "█"
EMPTY = "░"


def text_progress_bar(value: float, maximum: float, width: int = 50) -> str:
    if width <= 0:
        return ""
    if maximum <= 0:
        return EMPTY * width
    return "".join(FILLED if i < width * value / maximum else EMPTY for i in range(width))


def format_progress(
    tick: int,
    *,
    objects: int,
    running: int,
    length_hint: Optional[int] = None,
    skipped: bool = False,
    width: int = 50,
) -> str:
    verb = "skipping frame " if skipped else "rendering frame"
    parts = [f"{verb} {tick:05d}"]
    if length_hint:
        parts.append(text_progress_bar(tick, length_hint, width))
    parts.append(f"objects: {objects}")
    parts.append(f"tweens running: {running}")
    return " - ".join(parts)
