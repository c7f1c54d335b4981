"""
Project discovery and loading.

A project is a Python package under ``projects/<name>/`` (or any directory /
``.py`` file given explicitly) exposing ``build(canvas) -> Project``.  An
optional ``project.yaml`` next to it supplies render settings.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from .config import Canvas, OutputKind
from .errors import ConfigError, ProjectNotFoundError
from .primitives import Coroutine
from .utils.assets import projects_dir

LOG = logging.getLogger(__name__)

PROJECT_MODULE_PREFIX = "sceneloom_projects"
PROJECT_SETTINGS_FILE = "project.yaml"

SceneFactory = Callable[[Canvas], Coroutine]


@dataclass
class Project:
    name: str
    scenes: List[SceneFactory] = field(default_factory=list)
    audio_path: Optional[str] = None
    output: Optional[OutputKind] = None
    shorter: bool = False
    length_hint: Optional[int] = None
    root: Optional[Path] = None

    def build_scenes(self, canvas: Canvas) -> List[Coroutine]:
        return [factory(canvas) for factory in self.scenes]

    def settings_overrides(self) -> Dict[str, Any]:
        """Settings the project itself pins; unset values are left out."""

        overrides: Dict[str, Any] = {
            "audio_path": self.audio_path,
            "output": self.output,
            "length_hint": self.length_hint,
        }
        if self.shorter:
            overrides["shorter"] = True
        return {key: value for key, value in overrides.items() if value is not None}


def read_project_settings(root: Path) -> Dict[str, Any]:
    """Contents of ``project.yaml`` in ``root``, or an empty mapping."""

    path = Path(root) / PROJECT_SETTINGS_FILE
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def locate_project(target: Union[str, Path]) -> Path:
    """Path of the module file implementing project ``target``."""

    candidate = Path(target).expanduser()
    options = [candidate]
    if not candidate.is_absolute():
        options.append(projects_dir() / candidate)
    for option in options:
        if option.is_dir() and (option / "__init__.py").is_file():
            return option / "__init__.py"
        if option.is_file() and option.suffix == ".py":
            return option
        with_suffix = option.with_suffix(".py")
        if with_suffix.is_file():
            return with_suffix
    raise ProjectNotFoundError(f"Project '{target}' not found (looked in {', '.join(map(str, options))})")


def _import(module_file: Path, name: str):
    module_name = f"{PROJECT_MODULE_PREFIX}.{name}"
    is_package = module_file.name == "__init__.py"
    spec = importlib.util.spec_from_file_location(
        module_name,
        module_file,
        submodule_search_locations=[str(module_file.parent)] if is_package else None,
    )
    if spec is None or spec.loader is None:
        raise ProjectNotFoundError(f"Cannot import project from {module_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_project(target: Union[str, Path], canvas: Optional[Canvas] = None) -> Project:
    """
    Import the project ``target`` and call its ``build(canvas)``.
    """

    module_file = locate_project(target)
    root = module_file.parent
    name = root.name if module_file.name == "__init__.py" else module_file.stem
    module = _import(module_file, name)

    build = getattr(module, "build", None)
    if not callable(build):
        raise ProjectNotFoundError(f"Project '{name}' ({module_file}) does not define build(canvas)")
    project = build(canvas or Canvas())
    if not isinstance(project, Project):
        raise ProjectNotFoundError(
            f"build() of project '{name}' must return a Project, got {type(project).__name__}"
        )
    if project.root is None:
        project.root = root
    LOG.info("Loaded project %s with %d scene(s) from %s", project.name, len(project.scenes), module_file)
    return project
