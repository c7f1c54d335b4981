"""
Asset and project discovery utilities.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

ENV_ROOT_VAR = "SCENELOOM_ROOT"

PathLike = Union[str, "os.PathLike[str]"]

_active_root: Optional[Path] = None


def _is_project_root(path: Path) -> bool:
    return (path / "projects").is_dir()


def _iter_unique(paths: Iterable[Optional[Path]]) -> Iterable[Path]:
    seen: set[Path] = set()
    for path in paths:
        if path is None:
            continue
        try:
            resolved = path.resolve()
        except FileNotFoundError:
            continue
        if resolved in seen:
            continue
        seen.add(resolved)
        yield resolved


@lru_cache(maxsize=1)
def _discover_root_dir() -> Path:
    env_root = os.environ.get(ENV_ROOT_VAR)
    if env_root:
        candidate = Path(env_root).expanduser()
        if candidate.is_dir():
            return candidate.resolve()

    module_path = Path(__file__).resolve()
    module_root = module_path.parent.parent.parent
    cwd = Path.cwd()

    candidates = list(
        _iter_unique(
            [
                cwd,
                module_root,
                *cwd.parents,
                *module_path.parents,
            ]
        )
    )

    for candidate in candidates:
        if _is_project_root(candidate):
            return candidate

    return cwd.resolve()


def root_dir() -> Path:
    """Directory that holds ``projects/`` (or ``$SCENELOOM_ROOT``)."""

    return _discover_root_dir()


def projects_dir() -> Path:
    return root_dir() / "projects"


@contextmanager
def asset_root(path: PathLike) -> Iterator[Path]:
    """
    Resolve relative asset paths against ``path`` while the block runs.
    """

    global _active_root
    previous = _active_root
    _active_root = Path(path).expanduser().resolve()
    try:
        yield _active_root
    finally:
        _active_root = previous


def _search_roots() -> List[Path]:
    roots = [_active_root] if _active_root is not None else []
    roots.append(root_dir())
    return list(_iter_unique(roots))


def resolve_asset(path: PathLike) -> Path:
    """
    Resolve ``path`` to an absolute location.

    Relative paths are tried against the active asset root first and then
    the project root; the first existing candidate wins.  When none exist the
    first candidate is returned so callers can report it.
    """

    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    options = [root / candidate for root in _search_roots()]
    for option in options:
        if option.exists():
            return option
    return options[0]
