"""
Pydantic schemas for the preview API.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ScenePreviewModel(BaseModel):
    index: int
    name: str
    tick: int
    url: str

    model_config = ConfigDict(populate_by_name=True)


class SceneList(BaseModel):
    scenes: List[ScenePreviewModel] = Field(default_factory=list)


class HealthModel(BaseModel):
    status: str = "ok"
    scenes: int = 0
