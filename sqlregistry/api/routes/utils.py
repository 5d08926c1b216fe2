from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sqlregistry.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/liveness/", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness check: is the process alive and responsive? No file or DB I/O.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Process unhealthy", "data": failures},
        )
    return True


@router.get("/health-check/", response_model=None)
def health_check() -> bool | JSONResponse:
    """
    Readiness check: registry loaded without suppressed failures, database up if configured.

    Returns 200 with true when ready; 503 with the list of failures otherwise.
    """
    ok, failures = readiness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "message": "Service not ready",
                "data": failures,
            },
        )
    return True
