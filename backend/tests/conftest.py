import json
import os
from datetime import datetime, timedelta, timezone

# keep the app's own engine away from any real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from scrimbot.api.deps import get_clients
from scrimbot.db.base import Base
from scrimbot.db.session import get_db
from scrimbot.main import app
from scrimbot.models import game, team_guild  # noqa: F401
from scrimbot.services.cache import SimpleTTLCache
from scrimbot.services.discord_client import DiscordClient
from scrimbot.services.rgl_client import RglClient
from scrimbot.services.scheduling import Clients
from scrimbot.services.serveme_client import ServemeClient

TEAM_ID = 1000
RGL_TEAM_ID = 11
OPPONENT_RGL_TEAM_ID = 22
MATCH_ID = 5000
SEASON_ID = 150


def iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()


def in_days(days: int, hour: int = 1, minute: int = 30) -> datetime:
    """A whole-minute utc datetime `days` from now."""
    base = datetime.now(timezone.utc) + timedelta(days=days)
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)


# ============================================================================
# Fake na.serveme.tf
# ============================================================================
class FakeServeme:
    def __init__(self):
        self.servers = [
            {"id": 1, "name": "NY #1", "ip_and_port": "ny.serveme.tf:27015"},
            {"id": 2, "name": "Chicago #3", "ip_and_port": "chi.serveme.tf:27035"},
            {"id": 3, "name": "Kansas #1", "ip_and_port": "ks.serveme.tf:27015"},
        ]
        self.maps = ["cp_badlands", "cp_process_f12", "koth_product_final", "cp_sunshine"]
        self.reservations = {}
        self.requests = []
        self.next_id = 900

    def add_reservation(self, starts_at, ends_at, status="Ready", **fields):
        self.next_id += 1
        reservation = {
            "id": self.next_id,
            "status": status,
            "starts_at": iso(starts_at),
            "ends_at": iso(ends_at),
            "password": "scrim.pw",
            "rcon": "scrim.rcon.secret",
            "server": self.servers[1],
            "first_map": None,
            "server_config_id": None,
        }
        reservation.update(fields)
        self.reservations[reservation["id"]] = reservation
        return reservation

    def calls(self, method, suffix=""):
        return [r for r in self.requests if r[0] == method and r[1].endswith(suffix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        if path == "/reservations/find_servers":
            return httpx.Response(200, json={"servers": self.servers})
        if path == "/maps":
            return httpx.Response(200, json={"maps": self.maps})
        if path == "/reservations" and request.method == "GET":
            return httpx.Response(200, json={"reservations": list(self.reservations.values())})
        if path == "/reservations" and request.method == "POST":
            fields = dict(body["reservation"])
            server_id = fields.pop("server_id")
            server = next(s for s in self.servers if s["id"] == server_id)
            self.next_id += 1
            reservation = {
                "id": self.next_id,
                "status": "Waiting to start",
                "server": server,
                "first_map": None,
                "server_config_id": None,
                **fields,
            }
            self.reservations[reservation["id"]] = reservation
            return httpx.Response(200, json={"reservation": reservation})

        reservation_id = int(path.rsplit("/", 1)[-1])
        reservation = self.reservations.get(reservation_id)
        if reservation is None:
            return httpx.Response(404, json={"error": "not found"})

        if request.method == "GET":
            return httpx.Response(200, json={"reservation": reservation})
        if request.method == "PATCH":
            reservation.update(body["reservation"])
            return httpx.Response(200, json={"reservation": reservation})
        if request.method == "DELETE":
            del self.reservations[reservation_id]
            return httpx.Response(204)

        return httpx.Response(405)


# ============================================================================
# Fake api.rgl.gg
# ============================================================================
class FakeRgl:
    def __init__(self):
        self.match_date = in_days(3, hour=0, minute=30)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v0")
        self.requests.append(path)

        if path == f"/matches/{MATCH_ID}":
            return httpx.Response(
                200,
                json={
                    "matchId": MATCH_ID,
                    "seasonId": SEASON_ID,
                    "divisionId": 3,
                    "matchDate": iso(self.match_date),
                    "matchName": "Week 4",
                    "teams": [
                        {"teamName": "Home Team", "teamId": RGL_TEAM_ID, "isHome": True},
                        {"teamName": "Away Team", "teamId": OPPONENT_RGL_TEAM_ID, "isHome": False},
                    ],
                    "maps": [{"mapName": "koth_product_final"}, {"mapName": "cp_process_f12"}],
                },
            )
        if path == f"/seasons/{SEASON_ID}":
            return httpx.Response(200, json={"name": "Sixes S20", "formatName": "Sixes"})
        if path == f"/teams/{RGL_TEAM_ID}":
            return httpx.Response(
                200, json={"teamId": RGL_TEAM_ID, "name": "Home Team", "seasonId": SEASON_ID}
            )
        return httpx.Response(404, json={"message": "not found"})


# ============================================================================
# Fake discord.com
# ============================================================================
class FakeDiscord:
    def __init__(self):
        self.messages = {}
        self.sent = []
        self.edited = []
        self.next_id = 7000

    def handler(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.split("/")
        payload = json.loads(request.content) if request.content else None

        if request.method == "POST":
            self.next_id += 1
            self.messages[self.next_id] = payload
            self.sent.append((int(parts[-2]), payload))
            return httpx.Response(200, json={"id": str(self.next_id)})

        message_id = int(parts[-1])
        if message_id not in self.messages:
            return httpx.Response(404, json={"message": "Unknown Message", "code": 10008})

        self.messages[message_id] = payload
        self.edited.append((message_id, payload))
        return httpx.Response(200, json={"id": str(message_id)})


# ============================================================================
# Fixtures
# ============================================================================
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def session_factory(tmp_path):
    """
    Sessions on a fresh sqlite file. NullPool opens a new connection per
    session so nothing is shared across event loops.
    """
    path = tmp_path / "scheduletf-test.db"

    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def serveme():
    return FakeServeme()


@pytest.fixture
def rgl():
    return FakeRgl()


@pytest.fixture
def discord():
    return FakeDiscord()


@pytest.fixture
def clients(serveme, rgl, discord):
    cache = SimpleTTLCache()
    return Clients(
        rgl=RglClient(cache=cache, transport=httpx.MockTransport(rgl.handler)),
        discord=DiscordClient(token="test", transport=httpx.MockTransport(discord.handler)),
        serveme_factory=lambda key: ServemeClient(
            key, cache=cache, transport=httpx.MockTransport(serveme.handler)
        ),
    )


@pytest.fixture
def client(session_factory, clients):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clients] = lambda: clients

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
