"""
SceneLoom: frame-synchronous, coroutine-scripted 2D animation rendering.

Scenes are generators that yield their drawable objects once and then
animate them through primitives such as :func:`tween` and :func:`pin_to`.
The :class:`Renderer` steps them at 60 ticks per second and writes JPEG
frames that :func:`encode` turns into an mp4 or GIF.
"""

from .config import FPS, Canvas, OutputKind, RenderSettings, load_settings
from .easing import EASINGS, available_easings, get_easing, resolve_easing
from .encoder import build_ffmpeg_command, encode
from .errors import (
    AnimationError,
    AssetNotFoundError,
    ConfigError,
    DegenerateGeometryError,
    EncodeError,
    MissingPropertyError,
    ProjectNotFoundError,
    RenderOutputError,
    SceneError,
    SceneLoomError,
    UnknownEasingError,
)
from .objects import Box, Image, RenderObject, Text, Video
from .primitives import parallel, pin_to, random_move, sequence, tween, wait_frames, wait_until_time
from .project import Project, load_project
from .renderer import Renderer, RenderResult, draw_frame
from .scheduler import Scheduler, Task, TickState

__version__ = "0.1.0"

__all__ = [
    "FPS",
    "Canvas",
    "OutputKind",
    "RenderSettings",
    "load_settings",
    "EASINGS",
    "available_easings",
    "get_easing",
    "resolve_easing",
    "build_ffmpeg_command",
    "encode",
    "AnimationError",
    "AssetNotFoundError",
    "ConfigError",
    "DegenerateGeometryError",
    "EncodeError",
    "MissingPropertyError",
    "ProjectNotFoundError",
    "RenderOutputError",
    "SceneError",
    "SceneLoomError",
    "UnknownEasingError",
    "Box",
    "Image",
    "RenderObject",
    "Text",
    "Video",
    "parallel",
    "pin_to",
    "random_move",
    "sequence",
    "tween",
    "wait_frames",
    "wait_until_time",
    "Project",
    "load_project",
    "Renderer",
    "RenderResult",
    "draw_frame",
    "Scheduler",
    "Task",
    "TickState",
]
