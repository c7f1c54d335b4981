"""
Demo project: text and boxes only, so it renders without external assets.
"""

from sceneloom import Canvas, OutputKind, Project

from .scenes import greeting, jitter, orbit


def build(canvas: Canvas) -> Project:
    return Project(
        name="demo",
        scenes=[greeting, orbit, jitter],
        output=OutputKind.MP4,
        length_hint=1200,
    )
