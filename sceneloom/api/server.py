"""
FastAPI preview surface for rendered scenes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Path as PathParam, Response
from fastapi.middleware.cors import CORSMiddleware

from . import schemas
from .state import PreviewCache

LOG = logging.getLogger(__name__)


def create_app(
    *,
    cache: Optional[PreviewCache] = None,
    preview_dir: Optional[Path] = None,
    lifespan: Optional[Callable[..., object]] = None,
) -> FastAPI:
    """
    Build the preview application.

    With ``preview_dir`` the cache is re-read from disk on every request, so
    a server can run alongside a render happening in another process.
    """

    memory_cache = cache if cache is not None else PreviewCache()

    def current_cache() -> PreviewCache:
        if preview_dir is not None:
            return PreviewCache.load(preview_dir)
        return memory_cache

    app = FastAPI(title="SceneLoom Preview API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz", response_model=schemas.HealthModel)
    async def healthz() -> schemas.HealthModel:
        return schemas.HealthModel(status="ok", scenes=len(current_cache()))

    @app.get("/scenes", response_model=schemas.SceneList)
    async def list_scenes() -> schemas.SceneList:
        return schemas.SceneList(
            scenes=[
                schemas.ScenePreviewModel(
                    index=preview.index,
                    name=preview.name,
                    tick=preview.tick,
                    url=f"/scenes/{preview.index}/preview",
                )
                for preview in current_cache().list()
            ]
        )

    @app.get("/scenes/{index}/preview")
    async def scene_preview(index: int = PathParam(..., ge=0)) -> Response:
        preview = current_cache().get(index)
        if preview is None:
            raise HTTPException(status_code=404, detail=f"No preview for scene {index}")
        return Response(content=preview.image, media_type="image/jpeg")

    return app
