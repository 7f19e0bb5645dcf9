"""
Service-level routes.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    cache_ok = await request.app.state.session_cache.ping()
    return {"status": "ok", "session_cache": "ok" if cache_ok else "unavailable"}
