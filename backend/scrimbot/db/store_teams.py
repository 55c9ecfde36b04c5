# scrimbot/db/store_teams.py
from sqlalchemy.ext.asyncio import AsyncSession

from scrimbot.models.team_guild import TeamGuild

CONFIG_FIELDS = (
    "rgl_team_id",
    "game_format",
    "schedule_channel_id",
    "serveme_api_key",
    "scrim_division",
)


# team config rows are created the first time a guild uses the bot
async def get_or_create_team(db: AsyncSession, team_id: int) -> TeamGuild:
    team = await db.get(TeamGuild, team_id)
    if team:
        return team

    team = TeamGuild(id=team_id)
    db.add(team)
    await db.flush()
    return team


async def update_team_config(db: AsyncSession, team: TeamGuild, **fields) -> TeamGuild:
    for name, value in fields.items():
        if name not in CONFIG_FIELDS:
            raise ValueError(f"unknown team config field: {name}")

        # a new channel means the old schedule message is somewhere else
        if name == "schedule_channel_id" and value != team.schedule_channel_id:
            team.schedule_message_id = None

        setattr(team, name, int(value) if name == "game_format" and value is not None else value)

    await db.flush()
    return team


async def set_schedule_message(db: AsyncSession, team: TeamGuild, message_id: int | None):
    team.schedule_message_id = message_id
    await db.flush()
