"""GET /v0/b/{bucket}/o/{path}: token-gated download of cached audio."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from moodshift.cache import ArtifactCache

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v0/b/{bucket}/o/{object_path:path}")
async def download_audio(
    bucket: str,
    object_path: str,
    request: Request,
    token: str = Query(default=""),
    alt: str = Query(default="media"),
) -> Response:
    cache: ArtifactCache = request.app.state.runtime.cache
    if bucket != cache.bucket or alt != "media":
        raise HTTPException(status_code=404, detail="Not found")

    found = await cache.resolve(object_path, token)
    if found is None:
        log.debug("Rejected download of %s", object_path)
        raise HTTPException(status_code=404, detail="Not found")

    data, obj = found
    headers = {"Cache-Control": obj.cache_control} if obj.cache_control else None
    return Response(content=data, media_type=obj.content_type, headers=headers)
