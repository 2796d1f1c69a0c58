# main.py (FastAPI): users demo service, logs every request
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from db import QueryExecutor, init_schema
from routers.api import api_router, fallback
from routers.probes import probes_router
from routers.users import users_router
from settings import Settings, settings as default_settings

logging.basicConfig(level=default_settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("demo")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = None
    if app.state.executor is None:
        try:
            owned = await init_schema(app.state.settings)
        except Exception:
            log.exception("Error setting up db")
            # re-raise so uvicorn exits before it binds the port
            raise
        app.state.executor = owned
    try:
        yield
    finally:
        if owned is not None:
            await owned.close()
            app.state.executor = None


def create_app(
    settings: Settings | None = None,
    *,
    executor: QueryExecutor | None = None,
    started_at: float | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Users demo",
        lifespan=lifespan,
        # keep every unknown path on the fallback route
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings or default_settings
    app.state.executor = executor
    app.state.started_at = time.monotonic() if started_at is None else started_at

    # --------- global request logger ----------
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        ip = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
        ua = request.headers.get("user-agent", "")
        log.info("REQ %s %s ip=%s ua=%s", request.method, request.url.path, ip, ua)

        response = await call_next(request)
        log.info("RESP %s %s -> %s", request.method, request.url.path, response.status_code)
        return response

    app.include_router(users_router, tags=["users"])
    app.include_router(probes_router, tags=["probes"])
    app.include_router(api_router, tags=["api"])
    # must stay last, it matches everything
    app.add_route("/{path:path}", fallback)
    return app


app = create_app()


def run() -> None:
    started_at = time.monotonic()
    log.info("Listening on %s:%s once the schema is ready", default_settings.host, default_settings.port)
    uvicorn.run(
        create_app(default_settings, started_at=started_at),
        host=default_settings.host,
        port=default_settings.port,
        lifespan="on",
    )


if __name__ == "__main__":
    run()
