from fastapi import APIRouter, Depends, Response, status

from mockforge.api.dependencies import get_store
from mockforge.api.schemas import HealthResponse, ReadinessResponse
from mockforge.core.ports.store import RecordStore
from mockforge.db import InMemoryRecordStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(response: Response, store: RecordStore = Depends(get_store)) -> ReadinessResponse:
    """Readiness check: the record store must answer a ping."""
    kind = "memory" if isinstance(store, InMemoryRecordStore) else "postgres"
    if not await store.ping():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="degraded", database="down", store=kind)
    return ReadinessResponse(store=kind)
