import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

log = logging.getLogger("demo")

probes_router = APIRouter()


def _now() -> float:
    return time.monotonic()


@probes_router.api_route("/_healthz", methods=["GET", "HEAD"])
def healthz():
    return PlainTextResponse("OK")


@probes_router.api_route("/_readyz", methods=["GET", "HEAD"])
def readyz(request: Request):
    # warm-up gate only, the database is not consulted
    state = request.app.state
    elapsed_ms = (_now() - state.started_at) * 1000
    log.info("READYCHECK elapsed_ms=%d", elapsed_ms)

    if elapsed_ms > state.settings.readiness_delay_ms:
        return PlainTextResponse("OK")
    return Response(status_code=500)
