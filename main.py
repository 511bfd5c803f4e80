import asyncio
import logging
import random
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import async_sessionmaker
import uvicorn

from models.database import async_session_maker, engine, init_db, settings
from models.transaction import TransactionManager
from repositories.pull_requests import SQLPullRequestRepository
from repositories.teams import SQLTeamRepository
from repositories.users import SQLUserRepository
from routes import users, teams, pull_request
from services.pull_request import PullRequestService
from services.selector import ReviewerSelector
from services.teams import TeamService
from services.users import UserService


logger = logging.getLogger("main")

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class Services:
    teams: TeamService
    users: UserService
    pull_requests: PullRequestService


def build_services(session_maker: async_sessionmaker, rng: Optional[random.Random] = None) -> Services:
    tm = TransactionManager(session_maker)
    team_repo = SQLTeamRepository(tm)
    user_repo = SQLUserRepository(tm)
    pr_repo = SQLPullRequestRepository(tm)
    selector = ReviewerSelector(rng)

    return Services(
        teams=TeamService(team_repo, user_repo, tm),
        users=UserService(user_repo, team_repo, pr_repo, tm),
        pull_requests=PullRequestService(pr_repo, user_repo, tm, selector),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info("Starting service (env=%s)", settings.env)
    await init_db()
    app.state.services = build_services(async_session_maker)

    yield

    await engine.dispose()


app = FastAPI(lifespan=lifespan)
app.state.request_timeout = settings.http_timeout

app.include_router(users.router)
app.include_router(teams.router)
app.include_router(pull_request.router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag the request with an id, bound its run time and log the outcome"""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    try:
        response = await asyncio.wait_for(call_next(request), timeout=request.app.state.request_timeout)
    except asyncio.TimeoutError:
        logger.warning("%s %s timed out (request_id=%s)", request.method, request.url.path, request_id)
        response = JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": {"error": {"code": "TIMEOUT", "message": "request timed out"}}}
        )
    except Exception:
        logger.exception("%s %s failed (request_id=%s)", request.method, request.url.path, request_id)
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}}
        )

    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "%s %s -> %d in %.1fms (request_id=%s)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000, request_id
    )
    return response


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    host, port = settings.http_host_port
    uvicorn.run(app, host=host, port=port, timeout_keep_alive=settings.http_idle_timeout)
