# A scheduled game: when it is, what it is (scrim or official match) and
# where it is played (hosted reservation, joined server, or undecided).
#
# Rows are only ever turned into ScheduledGame through decode_row, so the
# nullable columns never leak past this module.
import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from scrimbot.core.clock import ensure_utc
from scrimbot.core.config import settings
from scrimbot.core.constants import (
    GAME_DURATIONS,
    RESERVATION_PADDING,
    RESERVATION_PASSWORD_LENGTH,
    RESERVATION_RCON_LENGTH,
    GameFormat,
    GameKind,
)
from scrimbot.core.errors import (
    GameNotHosted,
    InvalidGameDetails,
    InvalidServerAssignment,
    NoServemeApiKey,
    NoServemeServers,
)
from scrimbot.services.map_catalog import ServerConfig, server_config
from scrimbot.services.serveme_client import ConnectInfo, Reservation

logger = logging.getLogger(__name__)

ALPHANUMERIC = string.ascii_letters + string.digits


# --- server assignment ---
@dataclass(frozen=True)
class Hosted:
    reservation_id: int


@dataclass(frozen=True)
class Joined:
    connect_info: ConnectInfo


@dataclass(frozen=True)
class Undecided:
    pass


UNDECIDED = Undecided()


# --- details ---
@dataclass(frozen=True)
class ScrimDetails:
    opponent_user_id: int
    game_format: GameFormat
    maps: tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchDetails:
    match_id: int


# columns owned by each editable facet of a game
FACET_COLUMNS = {
    "time": ("timestamp",),
    "opponent": ("opponent_user_id",),
    "format": ("game_format",),
    "maps": ("maps",),
    "server": ("reservation_id", "server_ip_and_port", "server_password"),
}


def random_alphanumeric(length: int) -> str:
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))


@dataclass
class ScheduledGame:
    team_id: int
    timestamp: datetime
    details: ScrimDetails | MatchDetails
    server: Hosted | Joined | Undecided = field(default=UNDECIDED)

    def __post_init__(self):
        self.timestamp = ensure_utc(self.timestamp)

    @property
    def kind(self) -> GameKind:
        if isinstance(self.details, MatchDetails):
            return GameKind.MATCH
        return GameKind.SCRIM

    @property
    def duration(self) -> timedelta:
        return GAME_DURATIONS[self.kind]

    @property
    def is_hosted(self) -> bool:
        return isinstance(self.server, Hosted)

    @property
    def reservation_id(self) -> int:
        if not isinstance(self.server, Hosted):
            raise GameNotHosted()
        return self.server.reservation_id

    def booking_window(self) -> tuple[datetime, datetime]:
        return (
            self.timestamp - RESERVATION_PADDING,
            self.timestamp + self.duration + RESERVATION_PADDING,
        )

    # --- league resolution (matches store nothing but the match id) ---
    async def resolve_format(self, rgl=None) -> GameFormat:
        if isinstance(self.details, ScrimDetails):
            return self.details.game_format

        match = await rgl.get_match(self.details.match_id)
        season = await rgl.get_season(match.season_id)
        return season.format_name

    async def resolve_maps(self, rgl=None) -> list[str]:
        if isinstance(self.details, ScrimDetails):
            return list(self.details.maps)

        match = await rgl.get_match(self.details.match_id)
        return match.map_names

    async def first_map_and_config(self, rgl=None) -> tuple[str | None, ServerConfig | None]:
        maps = await self.resolve_maps(rgl)
        if not maps:
            return None, None

        game_format = await self.resolve_format(rgl)
        return maps[0], server_config(maps[0], self.kind, game_format)

    async def connect_info(self, serveme=None) -> ConnectInfo | None:
        if isinstance(self.server, Joined):
            return self.server.connect_info
        if isinstance(self.server, Hosted):
            if serveme is None:
                raise NoServemeApiKey()
            reservation = await serveme.get_reservation(self.server.reservation_id)
            return reservation.connect_info
        return None

    # --- reservation sync ---
    async def create_reservation(self, serveme, rgl=None, preferred_prefixes=None) -> Reservation:
        """
        Book a new reservation covering this game's booking window and move
        the game to Hosted. Only servers in the preferred regions are used.
        """
        prefixes = tuple(preferred_prefixes or settings.PREFERRED_SERVER_PREFIXES)
        first_map, config = await self.first_map_and_config(rgl)

        starts_at, ends_at = self.booking_window()
        servers = await serveme.find_servers(starts_at, ends_at)

        server = next((s for s in servers if s.ip_and_port.startswith(prefixes)), None)
        if server is None:
            raise NoServemeServers()

        prefix = self.kind.value
        reservation = await serveme.create_reservation(
            starts_at=starts_at,
            ends_at=ends_at,
            server_id=server.id,
            password=f"{prefix}.{random_alphanumeric(RESERVATION_PASSWORD_LENGTH)}",
            rcon=f"{prefix}.rcon.{random_alphanumeric(RESERVATION_RCON_LENGTH)}",
            first_map=first_map,
            server_config_id=config.id if config else None,
            enable_plugins=True,
            enable_demos_tf=True,
        )

        logger.info("booked reservation %s for game at %s", reservation.id, self.timestamp)
        self.server = Hosted(reservation.id)
        return reservation

    async def edit_reservation(self, serveme, rgl=None) -> Reservation:
        """
        Bring the hosted reservation in line with this game.

        The window only ever grows. The first map and its config are only
        sent when the game now starts at or before the reservation does,
        and only fields that actually differ are sent at all.
        """
        reservation = await serveme.get_reservation(self.reservation_id)
        starts_at, ends_at = self.booking_window()

        changes = {}

        if starts_at <= reservation.starts_at:
            first_map, config = await self.first_map_and_config(rgl)
            if first_map is not None and config is not None:
                if first_map != reservation.first_map:
                    changes["first_map"] = first_map
                if config.id != reservation.server_config_id:
                    changes["server_config_id"] = config.id

        starts_at = min(starts_at, reservation.starts_at)
        ends_at = max(ends_at, reservation.ends_at)

        if starts_at != reservation.starts_at:
            changes["starts_at"] = starts_at
        if ends_at != reservation.ends_at:
            changes["ends_at"] = ends_at

        if not changes:
            logger.debug("reservation %s already up to date", reservation.id)
            return reservation

        return await serveme.edit_reservation(reservation.id, **changes)

    async def delete_reservation(self, serveme) -> Reservation | None:
        deleted = await serveme.delete_reservation(self.reservation_id)
        self.server = UNDECIDED
        return deleted


def decode_server(row) -> Hosted | Joined | Undecided:
    ip_and_port = row.server_ip_and_port
    password = row.server_password

    if (ip_and_port is None) != (password is None):
        raise InvalidServerAssignment()

    has_connect = ip_and_port is not None
    has_reservation = row.reservation_id is not None

    if has_reservation and has_connect:
        raise InvalidServerAssignment()
    if has_reservation:
        return Hosted(row.reservation_id)
    if has_connect:
        return Joined(ConnectInfo(ip_and_port, password))
    return UNDECIDED


def decode_details(row) -> ScrimDetails | MatchDetails:
    scrim_fields = (row.opponent_user_id, row.game_format, row.maps)
    is_match = row.rgl_match_id is not None

    if is_match and all(f is None for f in scrim_fields):
        return MatchDetails(row.rgl_match_id)

    if not is_match and all(f is not None for f in scrim_fields):
        try:
            game_format = GameFormat(row.game_format)
        except ValueError:
            raise InvalidGameDetails() from None
        return ScrimDetails(row.opponent_user_id, game_format, tuple(row.maps))

    raise InvalidGameDetails()


def decode_row(row) -> ScheduledGame:
    return ScheduledGame(
        team_id=row.team_guild_id,
        timestamp=row.timestamp,
        details=decode_details(row),
        server=decode_server(row),
    )


def encode_row(game: ScheduledGame) -> dict:
    columns = {
        "team_guild_id": game.team_id,
        "timestamp": game.timestamp,
        "reservation_id": None,
        "server_ip_and_port": None,
        "server_password": None,
        "opponent_user_id": None,
        "game_format": None,
        "maps": None,
        "rgl_match_id": None,
    }

    if isinstance(game.server, Hosted):
        columns["reservation_id"] = game.server.reservation_id
    elif isinstance(game.server, Joined):
        columns["server_ip_and_port"] = game.server.connect_info.address
        columns["server_password"] = game.server.connect_info.password

    if isinstance(game.details, ScrimDetails):
        columns["opponent_user_id"] = game.details.opponent_user_id
        columns["game_format"] = int(game.details.game_format)
        columns["maps"] = list(game.details.maps)
    else:
        columns["rgl_match_id"] = game.details.match_id

    return columns
