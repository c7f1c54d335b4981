"""
Render configuration.

``Canvas`` describes the output raster and is passed explicitly to every
scene factory.  ``RenderSettings`` carries everything else a run needs and is
usually loaded from a YAML profile and then overridden from the command line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError

LOG = logging.getLogger(__name__)

FPS = 60
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720


class OutputKind(str, Enum):
    """Assembly modes understood by the encoder."""

    MP4 = "mp4"
    GIF = "gif"
    GIFLOOP = "gifloop"
    NONE = "none"


@dataclass(frozen=True)
class Canvas:
    """
    Output raster dimensions plus the handful of fractional anchor points
    scenes tend to position things against.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    @property
    def center_x(self) -> float:
        return self.width / 2

    @property
    def center_y(self) -> float:
        return self.height / 2

    @property
    def half_x(self) -> float:
        return self.width / 2

    @property
    def half_y(self) -> float:
        return self.height / 2

    @property
    def third_x(self) -> float:
        return self.width / 3

    @property
    def third_y(self) -> float:
        return self.height / 3

    @property
    def two_thirds_x(self) -> float:
        return self.width / 3 * 2

    @property
    def two_thirds_y(self) -> float:
        return self.height / 3 * 2

    @property
    def quarter_x(self) -> float:
        return self.width / 4

    @property
    def quarter_y(self) -> float:
        return self.height / 4

    @property
    def three_quarters_x(self) -> float:
        return self.width / 4 * 3

    @property
    def three_quarters_y(self) -> float:
        return self.height / 4 * 3

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


class RenderSettings(BaseModel):
    start_frame: int = Field(default=0, validation_alias=AliasChoices("start_frame", "startFrame", "start"))
    end_frame: int = Field(default=-1, validation_alias=AliasChoices("end_frame", "endFrame", "end"))
    out_dir: Path = Field(default=Path("out"), validation_alias=AliasChoices("out_dir", "outDir"))
    output: OutputKind = Field(default=OutputKind.MP4, validation_alias=AliasChoices("output", "type"))
    output_path: Optional[Path] = Field(default=None, validation_alias=AliasChoices("output_path", "outputPath"))
    audio_path: Optional[str] = Field(default=None, validation_alias=AliasChoices("audio_path", "audioPath", "audio"))
    shorter: bool = False
    length_hint: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("length_hint", "lengthHint", "vidLength")
    )
    jpeg_quality: int = Field(default=70, validation_alias=AliasChoices("jpeg_quality", "quality"))
    background: str = "black"
    seed: int = 0
    cache_previews: bool = True
    keep_frames: bool = False
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    ffmpeg: str = "ffmpeg"

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="ignore")

    @field_validator("output", mode="before")
    def _normalise_output(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("start_frame")
    def _validate_start(cls, value: int) -> int:
        if value < 0:
            raise ValueError("start_frame must be non-negative")
        return value

    @field_validator("jpeg_quality", mode="before")
    def _clamp_quality(cls, value: object) -> int:
        return max(1, min(95, int(value)))  # type: ignore[arg-type]

    @field_validator("width", "height")
    def _validate_dimension(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("canvas dimensions must be positive")
        return value

    @field_validator("length_hint")
    def _validate_length_hint(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            return None
        return value

    @model_validator(mode="after")
    def _validate_window(self) -> "RenderSettings":
        if self.end_frame != -1 and self.end_frame < self.start_frame:
            raise ValueError("end_frame must be -1 or not before start_frame")
        return self

    # ------------------------------------------------------------------ helpers

    def in_window(self, tick: int) -> bool:
        """Whether ``tick`` should be rasterised."""

        if tick < self.start_frame:
            return False
        if self.end_frame != -1 and tick > self.end_frame:
            return False
        return True

    def canvas(self) -> Canvas:
        return Canvas(width=self.width, height=self.height)

    def resolved_output_path(self) -> Optional[Path]:
        if self.output is OutputKind.NONE:
            return None
        if self.output_path is not None:
            return self.output_path
        extension = "mp4" if self.output is OutputKind.MP4 else "gif"
        return Path(f"out.{extension}")

    def merged(self, **overrides: Any) -> "RenderSettings":
        """
        Return a validated copy with ``overrides`` applied; ``None`` values
        are ignored so unset CLI flags do not clobber profile values.
        """

        payload: Dict[str, Any] = self.model_dump()
        payload.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return RenderSettings.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(path: Optional[Union[str, Path]] = None, **overrides: Any) -> RenderSettings:
    """
    Load a YAML profile into :class:`RenderSettings`.

    A missing ``path`` (or a path that does not exist) yields the defaults.
    """

    data: Dict[str, Any] = {}
    if path is not None:
        profile = Path(path)
        try:
            with profile.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except FileNotFoundError:
            LOG.debug("Settings profile %s not found; using defaults", profile)
            loaded = {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {profile}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Settings profile {profile} must contain a mapping")
        data.update(loaded)

    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return RenderSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
