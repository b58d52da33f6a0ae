from fastapi import APIRouter, Request

from loyaltyapi.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request) -> HealthCheckResponse:
    """Health check endpoint."""

    handle = getattr(request.app.state, "accrual_worker", None)
    return HealthCheckResponse(accrual_worker_running=bool(handle and handle.running))
