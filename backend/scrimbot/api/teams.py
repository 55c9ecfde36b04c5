# Team configuration and the published schedule
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.api.deps import get_clients, get_team
from scrimbot.api.schemas import TeamConfigOut, TeamConfigUpdate, team_config_out
from scrimbot.db.session import get_db
from scrimbot.db.store_teams import update_team_config
from scrimbot.services.schedule import refresh_schedule
from scrimbot.services.scheduling import Clients

router = APIRouter()


@router.get("/config", response_model=TeamConfigOut)
async def get_config(team=Depends(get_team)):
    return team_config_out(team)


@router.patch("/config", response_model=TeamConfigOut)
async def patch_config(
    body: TeamConfigUpdate,
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
):
    await update_team_config(db, team, **body.model_dump(exclude_unset=True))
    await db.commit()
    return team_config_out(team)


# republish the schedule message, sending a new one if it was deleted
@router.post("/schedule/refresh")
async def refresh(
    team=Depends(get_team),
    db: AsyncSession = Depends(get_db),
    clients: Clients = Depends(get_clients),
):
    message_id = await refresh_schedule(
        db, team, clients.discord, clients.serveme_or_none(team), clients.rgl
    )
    await db.commit()
    return {"status": "success", "message_id": message_id}
