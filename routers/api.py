import os

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

api_router = APIRouter()


def burn_cpu(iterations: int) -> int:
    """Artificial load for /api: read the process environment `iterations` times.

    Returns the number of reads performed so callers (and tests) can see the
    work was done.
    """
    reads = 0
    for _ in range(max(iterations, 0)):
        os.environ.get("PATH")
        reads += 1
    return reads


# sync handler: FastAPI runs it in the threadpool, off the event loop
@api_router.api_route("/api", methods=["GET", "HEAD"])
def api(request: Request):
    burn_cpu(request.app.state.settings.api_busy_iterations)
    return {"api": "v1"}


# plain Starlette endpoint, mounted with no method list so every verb lands here.
# status stays 200 despite the message
def fallback(request: Request):
    return PlainTextResponse("Generic 404 Message")
