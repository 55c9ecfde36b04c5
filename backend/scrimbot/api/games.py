# Scheduling routes: host/join games, edit one facet at a time, cancel
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.api import schemas
from scrimbot.api.deps import from_unix, get_clients, get_team
from scrimbot.core.constants import GameKind
from scrimbot.db.session import get_db
from scrimbot.db.store_games import get_game, select_upcoming_games
from scrimbot.services import scheduling
from scrimbot.services.scheduling import Clients

router = APIRouter()


@router.get("/games")
async def list_games(
    kind: GameKind | None = None,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
):
    games = await select_upcoming_games(db, team.id, kind=kind)
    return {"games": [schemas.game_out(g) for g in games], "count": len(games)}


@router.get("/games/{timestamp}", response_model=schemas.GameOut)
async def show_game(timestamp: int, team=Depends(get_team), db: AsyncSession = Depends(get_db)):
    return schemas.game_out(await get_game(db, team.id, from_unix(timestamp)))


# --- scrims ---
@router.post("/scrims/host", response_model=schemas.GameOut)
async def host_scrim(
    body: schemas.HostScrimRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.host_scrim(
        db,
        team,
        clients,
        body.timestamp,
        body.opponent_user_id,
        game_format=body.game_format,
        maps=body.maps,
        reservation_id=body.reservation_id,
    )
    await db.commit()
    return schemas.game_out(game)


@router.post("/scrims/join", response_model=schemas.GameOut)
async def join_scrim(
    body: schemas.JoinScrimRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.join_scrim(
        db,
        team,
        clients,
        body.timestamp,
        body.opponent_user_id,
        game_format=body.game_format,
        maps=body.maps,
        connect_info=body.connect_info,
    )
    await db.commit()
    return schemas.game_out(game)


# --- official matches ---
@router.post("/matches/host", response_model=schemas.GameOut)
async def host_match(
    body: schemas.HostMatchRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.host_match(
        db, team, clients, body.match_id, reservation_id=body.reservation_id
    )
    await db.commit()
    return schemas.game_out(game)


@router.post("/matches/join", response_model=schemas.GameOut)
async def join_match(
    body: schemas.JoinMatchRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.join_match(
        db, team, clients, body.match_id, connect_info=body.connect_info
    )
    await db.commit()
    return schemas.game_out(game)


# --- edits ---
@router.patch("/games/{timestamp}/time", response_model=schemas.GameOut)
async def edit_time(
    timestamp: int,
    body: schemas.EditTimeRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_time(
        db, team, clients, from_unix(timestamp), body.timestamp
    )
    await db.commit()
    return schemas.game_out(game)


@router.patch("/games/{timestamp}/opponent", response_model=schemas.GameOut)
async def edit_opponent(
    timestamp: int,
    body: schemas.EditOpponentRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_opponent(
        db, team, clients, from_unix(timestamp), body.opponent_user_id
    )
    await db.commit()
    return schemas.game_out(game)


@router.patch("/games/{timestamp}/format", response_model=schemas.GameOut)
async def edit_format(
    timestamp: int,
    body: schemas.EditFormatRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_format(
        db, team, clients, from_unix(timestamp), body.game_format
    )
    await db.commit()
    return schemas.game_out(game)


@router.patch("/games/{timestamp}/maps", response_model=schemas.GameOut)
async def edit_maps(
    timestamp: int,
    body: schemas.EditMapsRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_maps(db, team, clients, from_unix(timestamp), body.maps)
    await db.commit()
    return schemas.game_out(game)


@router.patch("/games/{timestamp}/reservation", response_model=schemas.GameOut)
async def edit_reservation(
    timestamp: int,
    body: schemas.EditReservationRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_reservation(
        db, team, clients, from_unix(timestamp), body.reservation_id
    )
    await db.commit()
    return schemas.game_out(game)


@router.patch("/games/{timestamp}/connect-info", response_model=schemas.GameOut)
async def edit_connect_info(
    timestamp: int,
    body: schemas.EditConnectInfoRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.edit_game_connect_info(
        db, team, clients, from_unix(timestamp), body.connect_info
    )
    await db.commit()
    return schemas.game_out(game)


@router.delete("/games/{timestamp}", response_model=schemas.GameOut)
async def cancel(
    timestamp: int,
    delete_reservation: bool = False,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    game = await scheduling.cancel_game(
        db, team, clients, from_unix(timestamp), delete_reservation=delete_reservation
    )
    await db.commit()
    return schemas.game_out(game)


# --- live server control ---
@router.post("/changelevel")
async def changelevel(
    body: schemas.ChangeLevelRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    reservation = await scheduling.change_level(
        db, team, clients, body.map, timestamp=body.timestamp
    )
    return {
        "status": "success",
        "reservation_id": reservation.id,
        "first_map": reservation.first_map,
    }


@router.post("/rcon")
async def rcon(
    body: schemas.RconRequest,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    output = await scheduling.run_rcon(
        db, team, clients, body.command, reservation_id=body.reservation_id
    )
    return {"status": "success", "output": output}
