"""Utility helpers for SceneLoom."""

from .assets import asset_root, resolve_asset
from .logging import configure_logging
from .progress import format_progress, text_progress_bar

__all__ = [
    "asset_root",
    "configure_logging",
    "format_progress",
    "resolve_asset",
    "text_progress_bar",
]
