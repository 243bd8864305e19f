"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/solver", status_code=status.HTTP_200_OK)
def health_solver() -> dict:
    """Report the solver budget the service is running with."""
    return {
        "service": "solver",
        "alns_iterations": settings.alns_iterations,
        "time_limit_seconds": settings.solver_time_limit_seconds,
        "seeded": settings.solver_random_seed is not None,
    }
