from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def healthcheck(request: Request) -> dict[str, Any]:
    """Lightweight readiness probe reporting which backends are wired up."""
    cache = getattr(request.app.state, "cache", None)
    return {
        "status": "ok",
        "cache": "enabled" if cache is not None and cache.enabled else "disabled",
        "tmdb": "configured"
        if getattr(request.app.state, "tmdb", None) is not None
        else "unconfigured",
    }
