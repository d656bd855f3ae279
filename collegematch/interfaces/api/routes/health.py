"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter

from collegematch import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "collegematch"}


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "CollegeMatch API",
        "version": __version__,
        "description": "Multi-strategy fuzzy search over college catalogs",
        "docs": "/docs",
    }
