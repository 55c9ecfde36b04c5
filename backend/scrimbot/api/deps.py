from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.db.session import get_db
from scrimbot.db.store_teams import get_or_create_team
from scrimbot.models.team_guild import TeamGuild
from scrimbot.services.scheduling import Clients

# shared by every request, clients open a connection per call
clients = Clients()


def get_clients() -> Clients:
    return clients


# a team is created on first contact and kept even when the request only reads
async def get_team(team_id: int, db: AsyncSession = Depends(get_db)) -> TeamGuild:
    team = await get_or_create_team(db, team_id)
    await db.commit()
    return team


# games are addressed by their unix start time in urls
def from_unix(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, timezone.utc)
