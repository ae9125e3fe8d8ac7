import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

HEALTH_MEDIA_TYPE = "application/health+json"

router = APIRouter()
_start_time = time.time()


@router.get("/health")
def health():
    # Liveness only; upstream reachability is reported through the poller metrics.
    return JSONResponse(
        {"status": "pass", "uptime_s": round(time.time() - _start_time, 3)},
        media_type=HEALTH_MEDIA_TYPE,
    )
