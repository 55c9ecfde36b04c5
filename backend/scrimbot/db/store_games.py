# scrimbot/db/store_games.py
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.core.clock import ensure_utc, now_utc
from scrimbot.core.constants import UPCOMING_GRACE, GameKind
from scrimbot.core.errors import GameNotFound, TimeSlotTaken
from scrimbot.models.game import Game
from scrimbot.services.games import FACET_COLUMNS, ScheduledGame, decode_row, encode_row

logger = logging.getLogger(__name__)


# each game kind is recognized by the column only it sets
def kind_filter(kind: GameKind | None):
    if kind is GameKind.SCRIM:
        return Game.rgl_match_id.is_(None)
    if kind is GameKind.MATCH:
        return Game.rgl_match_id.is_not(None)
    return None


async def _get_row(db: AsyncSession, team_id: int, timestamp: datetime) -> Game | None:
    return await db.get(Game, (team_id, ensure_utc(timestamp)))


async def get_game(
    db: AsyncSession, team_id: int, timestamp: datetime, kind: GameKind | None = None
) -> ScheduledGame:
    row = await _get_row(db, team_id, timestamp)
    if row is None:
        raise GameNotFound()

    game = decode_row(row)
    if kind is not None and game.kind is not kind:
        raise GameNotFound()
    return game


async def ensure_time_open(db: AsyncSession, team_id: int, timestamp: datetime):
    stmt = select(Game.timestamp).where(
        Game.team_guild_id == team_id, Game.timestamp == ensure_utc(timestamp)
    )
    res = await db.execute(stmt)
    if res.first() is not None:
        raise TimeSlotTaken()


async def insert_game(db: AsyncSession, game: ScheduledGame) -> ScheduledGame:
    """
    Add the game to the current transaction. The primary key on
    (team, timestamp) backs up ensure_time_open when two callers race for
    the same slot.
    """
    db.add(Game(**encode_row(game)))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise TimeSlotTaken() from None
    return game


async def update_game(
    db: AsyncSession,
    game: ScheduledGame,
    *facets: str,
    previous_timestamp: datetime | None = None,
) -> ScheduledGame:
    """
    Persist only the named facets of `game`. When the time facet changes,
    `previous_timestamp` locates the existing row.
    """
    lookup = previous_timestamp if previous_timestamp is not None else game.timestamp
    row = await _get_row(db, game.team_id, lookup)
    if row is None:
        raise GameNotFound()

    columns = encode_row(game)
    for facet in facets:
        for column in FACET_COLUMNS[facet]:
            setattr(row, column, columns[column])

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise TimeSlotTaken() from None
    return game


async def delete_game(db: AsyncSession, team_id: int, timestamp: datetime) -> ScheduledGame:
    row = await _get_row(db, team_id, timestamp)
    if row is None:
        raise GameNotFound()

    game = decode_row(row)
    await db.delete(row)
    await db.flush()
    return game


async def select_upcoming_games(
    db: AsyncSession,
    team_id: int,
    kind: GameKind | None = None,
    limit: int | None = None,
    now: datetime | None = None,
) -> list[ScheduledGame]:
    since = (now or now_utc()) - UPCOMING_GRACE

    stmt = (
        select(Game)
        .where(Game.team_guild_id == team_id, Game.timestamp >= since)
        .order_by(Game.timestamp.asc())
    )
    predicate = kind_filter(kind)
    if predicate is not None:
        stmt = stmt.where(predicate)
    if limit is not None:
        stmt = stmt.limit(limit)

    res = await db.execute(stmt)
    return [decode_row(row) for row in res.scalars().all()]


async def select_active_games(
    db: AsyncSession,
    team_id: int,
    serveme,
    kind: GameKind | None = None,
    now: datetime | None = None,
) -> list[tuple[ScheduledGame, object]]:
    """
    Upcoming hosted games whose reservation is live and ready, closest to
    now first. On an exact tie the game that already started comes first.
    """
    now = now or now_utc()
    games = await select_upcoming_games(db, team_id, kind=kind, now=now)

    reservations = {
        r.id: r for r in await serveme.list_reservations() if r.status.is_ready
    }

    active = [
        (game, reservations[game.server.reservation_id])
        for game in games
        if game.is_hosted and game.server.reservation_id in reservations
    ]
    active.sort(
        key=lambda pair: (abs(pair[0].timestamp - now), pair[0].timestamp > now)
    )
    return active


async def select_latest_started_game(
    db: AsyncSession,
    team_id: int,
    kind: GameKind | None = None,
    now: datetime | None = None,
) -> ScheduledGame:
    stmt = (
        select(Game)
        .where(Game.team_guild_id == team_id, Game.timestamp <= (now or now_utc()))
        .order_by(Game.timestamp.desc())
        .limit(1)
    )
    predicate = kind_filter(kind)
    if predicate is not None:
        stmt = stmt.where(predicate)

    res = await db.execute(stmt)
    row = res.scalar_one_or_none()
    if row is None:
        raise GameNotFound()
    return decode_row(row)
