# Scheduling workflows. Each one runs inside the caller's transaction and
# leaves committing to the caller, so a failed external call leaves no row.
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from scrimbot.core.clock import ensure_utc
from scrimbot.core.constants import GameFormat, GameKind
from scrimbot.core.errors import (
    NoActiveGames,
    NoGameFormat,
    NoRglTeam,
    NoServemeApiKey,
)
from scrimbot.db.store_games import (
    delete_game,
    ensure_time_open,
    get_game,
    insert_game,
    select_active_games,
    select_latest_started_game,
    update_game,
)
from scrimbot.services.discord_client import DiscordClient
from scrimbot.services.games import (
    UNDECIDED,
    Hosted,
    Joined,
    MatchDetails,
    ScheduledGame,
    ScrimDetails,
)
from scrimbot.services.map_catalog import server_config
from scrimbot.services.rgl_client import RglClient
from scrimbot.services.schedule import refresh_schedule
from scrimbot.services.serveme_client import ConnectInfo, ServemeClient

logger = logging.getLogger(__name__)


@dataclass
class Clients:
    rgl: RglClient = field(default_factory=RglClient)
    discord: DiscordClient = field(default_factory=DiscordClient)
    serveme_factory: Callable[[str], ServemeClient] = ServemeClient

    def serveme(self, team) -> ServemeClient:
        if not team.serveme_api_key:
            raise NoServemeApiKey()
        return self.serveme_factory(team.serveme_api_key)

    def serveme_or_none(self, team) -> ServemeClient | None:
        if not team.serveme_api_key:
            return None
        return self.serveme_factory(team.serveme_api_key)


async def refresh_if_configured(db, team, clients: Clients, now=None) -> int | None:
    if team.schedule_channel_id is None:
        logger.debug("team %s has no schedule channel, not refreshing", team.id)
        return None

    return await refresh_schedule(
        db, team, clients.discord, clients.serveme_or_none(team), clients.rgl, now=now
    )


def _rgl_team_id(team) -> int:
    if team.rgl_team_id is None:
        raise NoRglTeam()
    return team.rgl_team_id


def _scrim_format(team, game_format: GameFormat | None) -> GameFormat:
    if game_format is not None:
        return GameFormat(game_format)
    if team.game_format is not None:
        return GameFormat(team.game_format)
    raise NoGameFormat()


async def _host(db, team, clients: Clients, game: ScheduledGame, reservation_id: int | None):
    serveme = clients.serveme(team)

    if reservation_id is not None:
        game.server = Hosted(reservation_id)
        await game.edit_reservation(serveme, clients.rgl)
    else:
        await game.create_reservation(serveme, clients.rgl)

    await insert_game(db, game)
    await refresh_if_configured(db, team, clients)
    return game


# --- scrims ---
async def host_scrim(
    db,
    team,
    clients: Clients,
    timestamp: datetime,
    opponent_user_id: int,
    game_format: GameFormat | None = None,
    maps=(),
    reservation_id: int | None = None,
) -> ScheduledGame:
    """
    Schedule a scrim on our own server. An existing reservation is synced
    to the game's window, otherwise a new one is booked.
    """
    await ensure_time_open(db, team.id, timestamp)

    game = ScheduledGame(
        team_id=team.id,
        timestamp=timestamp,
        details=ScrimDetails(opponent_user_id, _scrim_format(team, game_format), tuple(maps)),
    )
    return await _host(db, team, clients, game, reservation_id)


async def join_scrim(
    db,
    team,
    clients: Clients,
    timestamp: datetime,
    opponent_user_id: int,
    game_format: GameFormat | None = None,
    maps=(),
    connect_info: ConnectInfo | None = None,
) -> ScheduledGame:
    await ensure_time_open(db, team.id, timestamp)

    game = ScheduledGame(
        team_id=team.id,
        timestamp=timestamp,
        details=ScrimDetails(opponent_user_id, _scrim_format(team, game_format), tuple(maps)),
        server=Joined(connect_info) if connect_info else UNDECIDED,
    )
    await insert_game(db, game)
    await refresh_if_configured(db, team, clients)
    return game


# --- official matches ---
async def _match_game(db, team, clients: Clients, match_id: int, server) -> ScheduledGame:
    rgl_match = await clients.rgl.get_match(match_id)
    rgl_match.opponent_team(_rgl_team_id(team))

    await ensure_time_open(db, team.id, rgl_match.match_date)

    return ScheduledGame(
        team_id=team.id,
        timestamp=rgl_match.match_date,
        details=MatchDetails(match_id),
        server=server,
    )


async def host_match(
    db, team, clients: Clients, match_id: int, reservation_id: int | None = None
) -> ScheduledGame:
    game = await _match_game(db, team, clients, match_id, UNDECIDED)
    return await _host(db, team, clients, game, reservation_id)


async def join_match(
    db, team, clients: Clients, match_id: int, connect_info: ConnectInfo | None = None
) -> ScheduledGame:
    server = Joined(connect_info) if connect_info else UNDECIDED
    game = await _match_game(db, team, clients, match_id, server)

    await insert_game(db, game)
    await refresh_if_configured(db, team, clients)
    return game


# --- edits ---
async def _sync_reservation(team, clients: Clients, game: ScheduledGame):
    if game.is_hosted:
        await game.edit_reservation(clients.serveme(team), clients.rgl)


async def _save(db, team, clients: Clients, game, *facets, previous_timestamp=None):
    await update_game(db, game, *facets, previous_timestamp=previous_timestamp)
    await refresh_if_configured(db, team, clients)
    return game


def _replace_scrim(game: ScheduledGame, **changes) -> ScheduledGame:
    details = game.details
    game.details = ScrimDetails(
        changes.get("opponent_user_id", details.opponent_user_id),
        changes.get("game_format", details.game_format),
        tuple(changes.get("maps", details.maps)),
    )
    return game


async def edit_game_time(
    db, team, clients: Clients, timestamp: datetime, new_timestamp: datetime, kind=GameKind.SCRIM
) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, kind)

    new_timestamp = ensure_utc(new_timestamp)
    if new_timestamp == game.timestamp:
        return game

    await ensure_time_open(db, team.id, new_timestamp)

    previous_timestamp = game.timestamp
    game.timestamp = new_timestamp
    await _sync_reservation(team, clients, game)

    return await _save(db, team, clients, game, "time", previous_timestamp=previous_timestamp)


async def edit_game_opponent(
    db, team, clients: Clients, timestamp: datetime, opponent_user_id: int
) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, GameKind.SCRIM)
    _replace_scrim(game, opponent_user_id=opponent_user_id)
    return await _save(db, team, clients, game, "opponent")


async def edit_game_format(
    db, team, clients: Clients, timestamp: datetime, game_format: GameFormat
) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, GameKind.SCRIM)
    _replace_scrim(game, game_format=GameFormat(game_format))
    await _sync_reservation(team, clients, game)
    return await _save(db, team, clients, game, "format")


async def edit_game_maps(db, team, clients: Clients, timestamp: datetime, maps) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, GameKind.SCRIM)
    _replace_scrim(game, maps=maps or ())
    await _sync_reservation(team, clients, game)
    return await _save(db, team, clients, game, "maps")


async def edit_game_reservation(
    db, team, clients: Clients, timestamp: datetime, reservation_id: int | None, kind=None
) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, kind)

    if reservation_id is None:
        game.server = UNDECIDED
    else:
        game.server = Hosted(reservation_id)
        await _sync_reservation(team, clients, game)

    return await _save(db, team, clients, game, "server")


async def edit_game_connect_info(
    db, team, clients: Clients, timestamp: datetime, connect_info: ConnectInfo | None, kind=None
) -> ScheduledGame:
    game = await get_game(db, team.id, timestamp, kind)
    game.server = Joined(connect_info) if connect_info else UNDECIDED
    return await _save(db, team, clients, game, "server")


# --- cancel ---
async def cancel_game(
    db, team, clients: Clients, timestamp: datetime, delete_reservation: bool = False
) -> ScheduledGame:
    """
    Remove the game. Its reservation is left alone unless
    `delete_reservation` is set.
    """
    game = await delete_game(db, team.id, timestamp)

    if delete_reservation and game.is_hosted:
        await game.delete_reservation(clients.serveme(team))

    await refresh_if_configured(db, team, clients)
    return game


# --- live server control ---
async def change_level(
    db, team, clients: Clients, map_name: str, timestamp: datetime | None = None, now=None
):
    if timestamp is not None:
        game = await get_game(db, team.id, timestamp)
    else:
        game = await select_latest_started_game(db, team.id, now=now)

    serveme = clients.serveme(team)
    game_format = await game.resolve_format(clients.rgl)
    config = server_config(map_name, game.kind, game_format)

    return await serveme.edit_reservation(
        game.reservation_id,
        first_map=map_name,
        server_config_id=config.id if config else None,
    )


async def run_rcon(
    db, team, clients: Clients, command: str, reservation_id: int | None = None, now=None
) -> str:
    serveme = clients.serveme(team)

    if reservation_id is None:
        active = await select_active_games(db, team.id, serveme, now=now)
        if not active:
            raise NoActiveGames()
        reservation_id = active[0][0].reservation_id

    reservation = await serveme.get_reservation(reservation_id)
    return await serveme.run_console_command(reservation, command)
