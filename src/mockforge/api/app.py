from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mockforge import __version__
from mockforge.api.lifespan import lifespan
from mockforge.api.middleware import InternalErrorMiddleware
from mockforge.api.routes.health import router as health_router
from mockforge.api.routes.mock import router as mock_router
from mockforge.api.routes.projects import router as projects_router
from mockforge.api.routes.resources import router as resources_router
from mockforge.api.routes.root import router as root_router
from mockforge.core.errors import MockForgeError


def _error_response(message: str, status: int) -> JSONResponse:
    return JSONResponse({"error": {"message": message, "status": status}}, status_code=status)


async def _mockforge_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, MockForgeError)
    return JSONResponse(exc.to_body(), status_code=exc.status)


async def _validation_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return _error_response(f"Invalid request: {details}", 400)


async def _http_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return _error_response(str(exc.detail), exc.status_code)


def create_app() -> FastAPI:
    app = FastAPI(
        title="MockForge API",
        description="Template-driven mock REST endpoints backed by synthetic data.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_exception_handler(MockForgeError, _mockforge_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_middleware(InternalErrorMiddleware)

    # Management endpoints
    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(projects_router)
    app.include_router(resources_router)

    # Public mock endpoints; registered last so the catch-all path parameters never shadow the routes above
    app.include_router(mock_router)

    return app
