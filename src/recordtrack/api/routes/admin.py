"""Admin endpoints for tracker maintenance."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

router = APIRouter(tags=["admin"])


@router.post("/cleanup")
async def cleanup(request: Request, max_age_hours: float | None = Query(default=None, ge=0)) -> dict[str, int]:
    """Run an immediate cleanup pass; defaults to the configured age threshold."""
    removed = request.app.state.tracker.cleanup(max_age_hours)
    return {"removed": removed}
