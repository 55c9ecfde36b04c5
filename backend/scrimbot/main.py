# Main FastAPI application
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scrimbot.api import autocomplete, games, health, teams
from scrimbot.core.errors import CorruptStateError, NotFoundError, PreconditionError
from scrimbot.db.base import Base
from scrimbot.db.session import engine

# for logging in fastapi
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


app = FastAPI(title="scheduletf API")

app.include_router(health.router)
app.include_router(teams.router, prefix="/teams/{team_id}", tags=["Teams"])
app.include_router(games.router, prefix="/teams/{team_id}", tags=["Games"])
app.include_router(
    autocomplete.router, prefix="/teams/{team_id}/autocomplete", tags=["Autocomplete"]
)


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.exception_handler(NotFoundError)
async def not_found(request: Request, exc: NotFoundError):
    return _error(404, exc.message)


@app.exception_handler(PreconditionError)
async def precondition_failed(request: Request, exc: PreconditionError):
    return _error(409, exc.message)


@app.exception_handler(CorruptStateError)
async def corrupt_state(request: Request, exc: CorruptStateError):
    logger.error("corrupt game state on %s: %s", request.url.path, exc.message)
    return _error(500, exc.message)


@app.exception_handler(httpx.HTTPStatusError)
async def upstream_error(request: Request, exc: httpx.HTTPStatusError):
    logger.error(
        "upstream %s returned %s", exc.request.url.host, exc.response.status_code
    )
    return _error(
        502, f"{exc.request.url.host} responded with {exc.response.status_code}"
    )


@app.exception_handler(httpx.RequestError)
async def upstream_unreachable(request: Request, exc: httpx.RequestError):
    logger.error("upstream request failed: %s", exc)
    return _error(504, f"could not reach {exc.request.url.host}")


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/")
def root():
    return {"message": "scheduletf API running"}
