"""
Health check endpoints.

GET /        — liveness check, no dependencies touched.
GET /health  — checks MongoDB connectivity; failure → "unhealthy" (503).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_db
from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/")
async def alive() -> dict:
    return {"status": "backend is alive"}


@router.get("/health", response_model=HealthResponse)
async def health_check(db=Depends(get_db)) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=overall, checks=checks).model_dump(),
    )
