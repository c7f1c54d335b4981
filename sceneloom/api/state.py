"""
Shared preview state.

The renderer stores the last rendered image of every scene here; the preview
API serves it.  When a directory is configured the cache is mirrored to disk
so a preview server started later (or in another process) can pick it up.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

LOG = logging.getLogger(__name__)

MANIFEST_NAME = "index.json"


@dataclass
class ScenePreview:
    index: int
    name: str
    tick: int
    image: bytes

    @property
    def filename(self) -> str:
        return f"scene{self.index:02d}.jpeg"

    def to_dict(self) -> dict:
        return {
            "index": int(self.index),
            "name": self.name,
            "tick": int(self.tick),
            "file": self.filename,
        }


class PreviewCache:
    """Scene index → last rendered JPEG."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory is not None else None
        self._previews: Dict[int, ScenePreview] = {}

    def store(self, index: int, name: str, tick: int, image: bytes) -> ScenePreview:
        preview = ScenePreview(index=int(index), name=name, tick=int(tick), image=image)
        self._previews[preview.index] = preview
        if self.directory is not None:
            self._persist(preview, self.directory)
        return preview

    def get(self, index: int) -> Optional[ScenePreview]:
        return self._previews.get(int(index))

    def list(self) -> List[ScenePreview]:
        return [self._previews[key] for key in sorted(self._previews)]

    def clear(self) -> None:
        self._previews.clear()
        if self.directory is not None and self.directory.exists():
            for entry in self.directory.glob("scene*.jpeg"):
                entry.unlink()
            manifest = self.directory / MANIFEST_NAME
            if manifest.exists():
                manifest.unlink()

    def __len__(self) -> int:
        return len(self._previews)

    # ------------------------------------------------------------------ disk mirror

    def _persist(self, preview: ScenePreview, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / preview.filename).write_bytes(preview.image)
        manifest = [entry.to_dict() for entry in self.list()]
        (directory / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, directory: Path) -> "PreviewCache":
        """Rebuild a cache from a directory written by a previous render."""

        cache = cls(directory=None)
        manifest_path = Path(directory) / MANIFEST_NAME
        try:
            entries = json.loads(manifest_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            LOG.info("No preview manifest in %s", directory)
            entries = []
        for entry in entries:
            image_path = Path(directory) / str(entry.get("file", ""))
            try:
                image = image_path.read_bytes()
            except FileNotFoundError:
                LOG.warning("Preview image %s listed in manifest is missing", image_path)
                continue
            cache.store(int(entry["index"]), str(entry.get("name", "")), int(entry.get("tick", 0)), image)
        cache.directory = Path(directory)
        return cache
