# Client for the public RGL.gg league API (https://api.rgl.gg/v0)
import logging
from datetime import datetime

import httpx
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from scrimbot.core.clock import ensure_utc
from scrimbot.core.config import settings
from scrimbot.core.constants import GameFormat
from scrimbot.core.errors import TeamNotInMatch
from scrimbot.services.cache import CACHE, cached

logger = logging.getLogger(__name__)


class RglModel(BaseModel):
    # rgl responds in camelCase and with many fields we don't use
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RglMatchTeam(RglModel):
    team_id: int
    team_name: str


class RglMatchMap(RglModel):
    map_name: str


class RglMatch(RglModel):
    match_id: int
    season_id: int
    match_date: datetime
    match_name: str
    teams: list[RglMatchTeam]
    maps: list[RglMatchMap] = []

    @field_validator("match_date")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def map_names(self) -> list[str]:
        return [m.map_name for m in self.maps]

    def opponent_team(self, team_id: int) -> RglMatchTeam:
        ours = [t for t in self.teams if t.team_id == team_id]
        theirs = [t for t in self.teams if t.team_id != team_id]

        if len(ours) != 1 or len(theirs) != 1:
            raise TeamNotInMatch()
        return theirs[0]


class RglTeam(RglModel):
    team_id: int
    name: str
    season_id: int


class RglSeason(RglModel):
    name: str
    format_name: GameFormat

    @field_validator("format_name", mode="before")
    @classmethod
    def parse_format(cls, value):
        if isinstance(value, GameFormat):
            return value
        return GameFormat.from_name(str(value))


class RglProfileTeam(RglModel):
    id: int
    name: str
    division_name: str | None = None


class RglProfileTeams(RglModel):
    sixes: RglProfileTeam | None = None
    highlander: RglProfileTeam | None = None


class RglProfile(RglModel):
    steam_id: str
    name: str
    avatar: str | None = None
    current_teams: RglProfileTeams = RglProfileTeams()

    @field_validator("steam_id", mode="before")
    @classmethod
    def steam_id_as_str(cls, value):
        return str(value)


class RglClient:
    def __init__(self, cache=CACHE, transport=None):
        self.base_url = settings.RGL_BASE_URL
        self.cache = cache
        self.transport = transport

    async def _get(self, path: str):
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.HTTP_TIMEOUT,
            transport=self.transport,
        ) as client:
            res = await client.get(path)
            res.raise_for_status()
            return res.json()

    @cached(ttl_seconds=lambda: settings.LEAGUE_CACHE_TTL)
    async def get_match(self, match_id: int) -> RglMatch:
        logger.info("RGL API CALLED: get_match %s", match_id)
        return RglMatch.model_validate(await self._get(f"/matches/{match_id}"))

    @cached(ttl_seconds=lambda: settings.LEAGUE_CACHE_TTL)
    async def get_team(self, team_id: int) -> RglTeam:
        logger.info("RGL API CALLED: get_team %s", team_id)
        return RglTeam.model_validate(await self._get(f"/teams/{team_id}"))

    @cached(ttl_seconds=lambda: settings.LEAGUE_CACHE_TTL)
    async def get_season(self, season_id: int) -> RglSeason:
        logger.info("RGL API CALLED: get_season %s", season_id)
        return RglSeason.model_validate(await self._get(f"/seasons/{season_id}"))

    @cached(ttl_seconds=lambda: settings.LEAGUE_CACHE_TTL)
    async def get_profile(self, steam_id: str) -> RglProfile:
        logger.info("RGL API CALLED: get_profile %s", steam_id)
        return RglProfile.model_validate(await self._get(f"/profile/{steam_id}"))
