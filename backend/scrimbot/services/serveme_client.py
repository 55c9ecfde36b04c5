# Client for the na.serveme.tf reservation API
import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import httpx
from pydantic import BaseModel, field_validator
from rcon.source import rcon as source_rcon

from scrimbot.core.clock import ensure_utc
from scrimbot.core.config import settings
from scrimbot.core.errors import InvalidConnectCommand
from scrimbot.services.cache import CACHE, cached
from scrimbot.services.map_catalog import sort_catalog

logger = logging.getLogger(__name__)


CONNECT_PATTERN = re.compile(
    r'^\s*connect\s+"?(?P<address>[^\s;"]+)"?\s*;\s*password\s+"?(?P<password>[^"]*?)"?\s*;?\s*$',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ConnectInfo:
    address: str
    password: str

    @classmethod
    def parse(cls, command: str) -> "ConnectInfo":
        match = CONNECT_PATTERN.match(command or "")
        if not match or not match.group("password"):
            raise InvalidConnectCommand()
        return cls(match.group("address"), match.group("password"))

    def __str__(self):
        return f'connect {self.address}; password "{self.password}"'


class ReservationStatus(str, Enum):
    WAITING = "waiting"
    STARTING = "starting"
    UPDATING = "updating"
    READY = "ready"
    SDR_READY = "sdr-ready"
    ENDING = "ending"
    ENDED = "ended"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str) -> "ReservationStatus":
        text = text.strip().lower()
        if text.startswith("waiting"):
            return cls.WAITING
        if text.startswith("starting"):
            return cls.STARTING
        if text.startswith("server updating"):
            return cls.UPDATING
        if text == "ready":
            return cls.READY
        if text == "sdr ready":
            return cls.SDR_READY
        if text == "ending":
            return cls.ENDING
        if text == "ended":
            return cls.ENDED
        return cls.UNKNOWN

    @property
    def is_ready(self) -> bool:
        return self in (ReservationStatus.READY, ReservationStatus.SDR_READY)

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.ENDING, ReservationStatus.ENDED)


class Server(BaseModel):
    id: int
    name: str
    ip_and_port: str

    @property
    def host_and_port(self) -> tuple[str, int]:
        host, _, port = self.ip_and_port.rpartition(":")
        return host, int(port)


class Reservation(BaseModel):
    id: int
    status: ReservationStatus = ReservationStatus.UNKNOWN
    starts_at: datetime
    ends_at: datetime
    password: str
    rcon: str
    server: Server
    first_map: str | None = None
    server_config_id: int | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        if isinstance(value, ReservationStatus):
            return value
        return ReservationStatus.parse(str(value))

    @field_validator("starts_at", "ends_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def connect_info(self) -> ConnectInfo:
        return ConnectInfo(self.server.ip_and_port, self.password)

    @property
    def url(self) -> str:
        return f"https://na.serveme.tf/reservations/{self.id}"


def _iso(dt: datetime) -> str:
    return ensure_utc(dt).isoformat()


class ServemeClient:
    def __init__(self, api_key: str, cache=CACHE, transport=None):
        self.base_url = settings.SERVEME_BASE_URL
        self.api_key = api_key
        self.cache = cache
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Token token={self.api_key}"},
            timeout=settings.HTTP_TIMEOUT,
            transport=self.transport,
        )

    # reservations are cached per api key and id, so every write refreshes the entry
    def _reservation_key(self, reservation_id: int):
        owner = hashlib.sha256(self.api_key.encode()).hexdigest()
        return ("serveme", "reservation", owner, reservation_id)

    def _remember(self, reservation: Reservation) -> Reservation:
        self.cache.set(
            self._reservation_key(reservation.id),
            reservation,
            settings.RESERVATION_CACHE_TTL,
        )
        return reservation

    async def find_servers(self, starts_at: datetime, ends_at: datetime) -> list[Server]:
        logger.info("SERVEME API CALLED: find_servers")

        async with self._client() as client:
            res = await client.post(
                "/reservations/find_servers",
                json={"reservation": {"starts_at": _iso(starts_at), "ends_at": _iso(ends_at)}},
            )
            res.raise_for_status()
            return [Server.model_validate(s) for s in res.json()["servers"]]

    async def get_reservation(self, reservation_id: int) -> Reservation:
        async def load():
            logger.info("SERVEME API CALLED: get_reservation %s", reservation_id)

            async with self._client() as client:
                res = await client.get(f"/reservations/{reservation_id}")
                res.raise_for_status()
                return Reservation.model_validate(res.json()["reservation"])

        return await self.cache.get_or_fetch(
            self._reservation_key(reservation_id), load, settings.RESERVATION_CACHE_TTL
        )

    # always live, never cached
    async def list_reservations(self) -> list[Reservation]:
        logger.info("SERVEME API CALLED: list_reservations")

        async with self._client() as client:
            res = await client.get("/reservations")
            res.raise_for_status()
            return [Reservation.model_validate(r) for r in res.json()["reservations"]]

    async def create_reservation(
        self,
        starts_at: datetime,
        ends_at: datetime,
        server_id: int,
        password: str,
        rcon: str,
        first_map: str | None = None,
        server_config_id: int | None = None,
        enable_plugins: bool = True,
        enable_demos_tf: bool = True,
    ) -> Reservation:
        logger.info("SERVEME API CALLED: create_reservation")

        body = {
            "starts_at": _iso(starts_at),
            "ends_at": _iso(ends_at),
            "server_id": server_id,
            "password": password,
            "rcon": rcon,
            "enable_plugins": enable_plugins,
            "enable_demos_tf": enable_demos_tf,
        }
        if first_map is not None:
            body["first_map"] = first_map
        if server_config_id is not None:
            body["server_config_id"] = server_config_id

        async with self._client() as client:
            res = await client.post("/reservations", json={"reservation": body})
            res.raise_for_status()
            return self._remember(Reservation.model_validate(res.json()["reservation"]))

    async def edit_reservation(
        self,
        reservation_id: int,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
        first_map: str | None = None,
        server_config_id: int | None = None,
    ) -> Reservation:
        logger.info("SERVEME API CALLED: edit_reservation %s", reservation_id)

        body = {}
        if starts_at is not None:
            body["starts_at"] = _iso(starts_at)
        if ends_at is not None:
            body["ends_at"] = _iso(ends_at)
        if first_map is not None:
            body["first_map"] = first_map
        if server_config_id is not None:
            body["server_config_id"] = server_config_id

        async with self._client() as client:
            res = await client.patch(
                f"/reservations/{reservation_id}", json={"reservation": body}
            )
            res.raise_for_status()
            return self._remember(Reservation.model_validate(res.json()["reservation"]))

    async def delete_reservation(self, reservation_id: int) -> Reservation | None:
        logger.info("SERVEME API CALLED: delete_reservation %s", reservation_id)

        async with self._client() as client:
            res = await client.delete(f"/reservations/{reservation_id}")
            res.raise_for_status()

        self.cache.invalidate(self._reservation_key(reservation_id))

        if res.status_code == httpx.codes.NO_CONTENT:
            return None
        return Reservation.model_validate(res.json()["reservation"])

    # cache for 24 hrs
    @cached(ttl_seconds=lambda: settings.MAP_CACHE_TTL)
    async def list_maps(self, game_format=None) -> list[str]:
        logger.info("SERVEME API CALLED: list_maps")

        async with self._client() as client:
            res = await client.get("/maps")
            res.raise_for_status()
            return sort_catalog(res.json()["maps"], game_format)

    async def run_console_command(self, reservation: Reservation, command: str) -> str:
        logger.info("RCON: reservation %s", reservation.id)

        host, port = reservation.server.host_and_port
        return await source_rcon(
            command,
            host=host,
            port=port,
            passwd=reservation.rcon,
            timeout=settings.HTTP_TIMEOUT,
        )
