from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from mockforge import __version__

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Discovery document listing the entry points of the API."""
    return {
        "meta": {
            "title": "MockForge API",
            "description": "Template-driven mock REST endpoints backed by synthetic data.",
            "version": __version__,
        },
        "links": {
            "self": "/",
            "projects": "/projects",
            "resources": "/resources/{resource_id}",
            "mock": "/{project_id}/api/{version}/{resource_name}",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
