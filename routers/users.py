import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy import insert, select

from db import QueryExecutor, get_executor
from models.user import User
from schemas.user import UserOut

log = logging.getLogger("demo")

# fixed row cap for GET /users, there is no pagination
USERS_LIMIT = 30

users_router = APIRouter()


@users_router.post("/add_user")
async def add_user(name: str | None = None, executor: QueryExecutor = Depends(get_executor)):
    if not name:
        return PlainTextResponse("Send name query param please", status_code=400)

    try:
        await executor.execute(insert(User).values(name=name))
    except Exception:
        log.exception("Error inserting user")
        return PlainTextResponse("Error", status_code=500)

    return PlainTextResponse("OK")


@users_router.api_route("/users", methods=["GET", "HEAD"], response_model=list[UserOut])
async def list_users(executor: QueryExecutor = Depends(get_executor)):
    """Return up to USERS_LIMIT users in whatever order the database yields them."""
    try:
        rows = await executor.fetch_all(select(User.id, User.name).limit(USERS_LIMIT))
    except Exception:
        log.exception("Error fetching users")
        return Response(status_code=500)

    return rows
