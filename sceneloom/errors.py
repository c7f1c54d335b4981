"""
Exception hierarchy shared by the animation core, the renderer and the CLI.

Nothing in the pipeline retries: a run is deterministic, so any of these
errors points at a real problem in the project being rendered.
"""

from __future__ import annotations


class SceneLoomError(RuntimeError):
    """Base class for all SceneLoom errors."""


class AnimationError(SceneLoomError):
    """Raised when an animation script is malformed."""


class MissingPropertyError(AnimationError, AttributeError):
    """Raised when a coroutine animates a field its target does not have."""

    def __init__(self, target: object, name: str) -> None:
        kind = getattr(target, "type", type(target).__name__)
        super().__init__(f"{kind} object has no animatable property '{name}'")
        self.target = target
        self.name = name


class DegenerateGeometryError(AnimationError):
    """Raised when a transform would divide by a zero dimension."""


class SceneError(AnimationError):
    """Raised when a scene coroutine breaks the scene contract."""


class AssetNotFoundError(SceneLoomError, FileNotFoundError):
    """Raised when an image or video frame cannot be found on disk."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Asset not found: {path}")
        self.path = path


class RenderOutputError(SceneLoomError):
    """Raised when rendered frames cannot be written."""


class EncodeError(SceneLoomError):
    """Raised when the external encoder fails."""


class ConfigError(SceneLoomError):
    """Raised when a settings profile cannot be parsed or validated."""


class ProjectNotFoundError(SceneLoomError):
    """Raised when a project cannot be located or does not expose ``build``."""


class UnknownEasingError(KeyError):
    """Raised when an easing function is looked up by an unknown name."""
