# Autocomplete endpoints, each returns at most 25 {name, value} choices
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.api.deps import get_clients, get_team
from scrimbot.core.constants import GameFormat, GameKind
from scrimbot.db.session import get_db
from scrimbot.db.store_games import select_upcoming_games
from scrimbot.services import disambiguation
from scrimbot.services.games import MatchDetails
from scrimbot.services.schedule import describe_opponent
from scrimbot.services.scheduling import Clients

router = APIRouter()


def _choices(choices):
    return {"choices": [c._asdict() for c in choices]}


@router.get("/games")
async def autocomplete_games(
    q: str = "",
    kind: GameKind | None = None,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    games = disambiguation.match_games(await select_upcoming_games(db, team.id, kind=kind), q)

    opponents = {
        g.timestamp: await describe_opponent(g, clients.rgl, team.rgl_team_id)
        for g in games
        if isinstance(g.details, MatchDetails)
    }
    return _choices(disambiguation.game_choices(games, "", opponents=opponents))


@router.get("/times")
async def autocomplete_times(
    q: str = "",
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
):
    taken = [g.timestamp for g in await select_upcoming_games(db, team.id)]
    return _choices(disambiguation.time_slot_choices(q, taken))


@router.get("/reservations")
async def autocomplete_reservations(
    q: str = "",
    ready_only: bool = False,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    serveme = clients.serveme(team)

    if ready_only:
        live = {r.id for r in await serveme.list_reservations() if r.status.is_ready}
    else:
        live = {r.id for r in await serveme.list_reservations() if not r.status.is_terminal}

    games = [
        g
        for g in await select_upcoming_games(db, team.id)
        if g.is_hosted and g.reservation_id in live
    ]
    return _choices(disambiguation.reservation_choices(games, q))


@router.get("/maps")
async def autocomplete_maps(
    q: str = "",
    game_format: GameFormat | None = None,
    team=Depends(get_team),
    clients: Clients = Depends(get_clients),
):
    if game_format is None and team.game_format is not None:
        game_format = GameFormat(team.game_format)

    catalog = await clients.serveme(team).list_maps(game_format)
    return _choices(disambiguation.map_choices(q, catalog, game_format))
