# Request and response bodies for the HTTP api
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from scrimbot.core.constants import GameFormat, GameKind
from scrimbot.services.games import Hosted, Joined, ScheduledGame, ScrimDetails
from scrimbot.services.map_catalog import parse_map_list
from scrimbot.services.serveme_client import ConnectInfo


def _parse_format(value):
    if value is None or isinstance(value, GameFormat):
        return value
    if isinstance(value, int):
        return GameFormat(value)
    return GameFormat.from_name(str(value))


def _parse_maps(value):
    if value is None:
        return []
    if isinstance(value, str):
        return parse_map_list(value)
    return list(value)


def _parse_connect(value):
    if value is None or isinstance(value, ConnectInfo):
        return value
    return ConnectInfo.parse(value)


# --- team config ---
class TeamConfigUpdate(BaseModel):
    rgl_team_id: int | None = None
    game_format: GameFormat | None = None
    schedule_channel_id: int | None = None
    serveme_api_key: str | None = Field(default=None, max_length=32)
    scrim_division: str | None = None

    _format = field_validator("game_format", mode="before")(_parse_format)


class TeamConfigOut(BaseModel):
    team_id: int
    rgl_team_id: int | None
    game_format: str | None
    schedule_channel_id: int | None
    schedule_message_id: int | None
    serveme_api_key: str | None
    scrim_division: str | None


def team_config_out(team) -> TeamConfigOut:
    return TeamConfigOut(
        team_id=team.id,
        rgl_team_id=team.rgl_team_id,
        game_format=str(GameFormat(team.game_format)) if team.game_format else None,
        schedule_channel_id=team.schedule_channel_id,
        schedule_message_id=team.schedule_message_id,
        # never echo the key itself
        serveme_api_key="*" * len(team.serveme_api_key) if team.serveme_api_key else None,
        scrim_division=team.scrim_division,
    )


# --- scheduling ---
class ScrimRequest(BaseModel):
    timestamp: datetime
    opponent_user_id: int
    game_format: GameFormat | None = None
    maps: list[str] = []

    _format = field_validator("game_format", mode="before")(_parse_format)
    _maps = field_validator("maps", mode="before")(_parse_maps)


class HostScrimRequest(ScrimRequest):
    reservation_id: int | None = None


class JoinScrimRequest(ScrimRequest):
    connect_info: ConnectInfo | None = None

    _connect = field_validator("connect_info", mode="before")(_parse_connect)


class HostMatchRequest(BaseModel):
    match_id: int
    reservation_id: int | None = None


class JoinMatchRequest(BaseModel):
    match_id: int
    connect_info: ConnectInfo | None = None

    _connect = field_validator("connect_info", mode="before")(_parse_connect)


class EditTimeRequest(BaseModel):
    timestamp: datetime


class EditOpponentRequest(BaseModel):
    opponent_user_id: int


class EditFormatRequest(BaseModel):
    game_format: GameFormat

    _format = field_validator("game_format", mode="before")(_parse_format)


class EditMapsRequest(BaseModel):
    maps: list[str] = []

    _maps = field_validator("maps", mode="before")(_parse_maps)


class EditReservationRequest(BaseModel):
    reservation_id: int | None = None


class EditConnectInfoRequest(BaseModel):
    connect_info: ConnectInfo | None = None

    _connect = field_validator("connect_info", mode="before")(_parse_connect)


class ChangeLevelRequest(BaseModel):
    map: str
    timestamp: datetime | None = None


class RconRequest(BaseModel):
    command: str
    reservation_id: int | None = None


# --- responses ---
class ServerOut(BaseModel):
    state: str
    reservation_id: int | None = None
    connect: str | None = None


class GameOut(BaseModel):
    team_id: int
    timestamp: datetime
    kind: GameKind
    server: ServerOut
    opponent_user_id: int | None = None
    game_format: str | None = None
    maps: list[str] | None = None
    match_id: int | None = None


def game_out(game: ScheduledGame) -> GameOut:
    if isinstance(game.server, Hosted):
        server = ServerOut(state="hosted", reservation_id=game.server.reservation_id)
    elif isinstance(game.server, Joined):
        server = ServerOut(state="joined", connect=str(game.server.connect_info))
    else:
        server = ServerOut(state="undecided")

    out = GameOut(team_id=game.team_id, timestamp=game.timestamp, kind=game.kind, server=server)
    if isinstance(game.details, ScrimDetails):
        out.opponent_user_id = game.details.opponent_user_id
        out.game_format = str(game.details.game_format)
        out.maps = list(game.details.maps)
    else:
        out.match_id = game.details.match_id
    return out


class ChoiceOut(BaseModel):
    name: str
    value: str | int
