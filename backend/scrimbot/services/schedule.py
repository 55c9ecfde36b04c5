# The published schedule: one embed listing upcoming games grouped by day
import logging
from itertools import groupby

from scrimbot.core.clock import date_string, time_string, to_local
from scrimbot.core.constants import SCHEDULE_LIMIT, GameKind
from scrimbot.core.errors import NoScheduleChannel
from scrimbot.db.store_games import select_upcoming_games
from scrimbot.db.store_teams import set_schedule_message
from scrimbot.services.discord_client import MessageNotFound
from scrimbot.services.games import MatchDetails, ScheduledGame
from scrimbot.services.map_catalog import format_map_list

logger = logging.getLogger(__name__)

SCHEDULE_TITLE = "🗓️ Schedule"
SCHEDULE_COLOR = 0x5865F2


def connect_block(connect_info) -> str:
    text = str(connect_info) if connect_info is not None else "No connect info"
    return f"```\n{text}\n```"


async def describe_opponent(game: ScheduledGame, rgl=None, rgl_team_id: int | None = None) -> str:
    if isinstance(game.details, MatchDetails):
        match = await rgl.get_match(game.details.match_id)
        if rgl_team_id is None:
            return match.match_name
        return match.opponent_team(rgl_team_id).team_name

    return f"<@{game.details.opponent_user_id}>"


async def schedule_entry(game: ScheduledGame, team, serveme=None, rgl=None, include_connect=True) -> str:
    local_time = time_string(to_local(game.timestamp).time())
    opponent = await describe_opponent(game, rgl, team.rgl_team_id)

    line = f"**{local_time}:** {game.kind.label} vs. {opponent}"
    if game.kind is GameKind.SCRIM:
        line += f" ({format_map_list(game.details.maps)})"

    if not include_connect:
        return line + "\n"

    return f"{line} {connect_block(await game.connect_info(serveme))}"


async def build_schedule_embed(team, games, serveme=None, rgl=None) -> dict:
    """
    Build the message payload for the schedule channel.

    Games are grouped by their local date. Back-to-back games on the same
    server only show the connect info once, on the last game of the run.
    """
    embed = {"title": SCHEDULE_TITLE, "color": SCHEDULE_COLOR}

    if not games:
        embed["description"] = "No upcoming games."
        return {"embeds": [embed]}

    fields = []
    for day, day_games in groupby(games, key=lambda g: to_local(g.timestamp).date()):
        day_games = list(day_games)
        next_games = day_games[1:] + [None]

        entries = []
        for game, next_game in zip(day_games, next_games):
            include_connect = next_game is None or next_game.server != game.server
            entries.append(
                await schedule_entry(game, team, serveme, rgl, include_connect)
            )

        fields.append(
            {"name": f"**{date_string(day)}**", "value": "".join(entries), "inline": False}
        )

    embed["fields"] = fields
    return {"embeds": [embed]}


async def refresh_schedule(db, team, discord, serveme=None, rgl=None, now=None) -> int:
    """
    Edit the published schedule message, or send a new one if there is
    none yet or it was deleted. Returns the message id.
    """
    if team.schedule_channel_id is None:
        raise NoScheduleChannel()

    games = await select_upcoming_games(db, team.id, limit=SCHEDULE_LIMIT, now=now)
    payload = await build_schedule_embed(team, games, serveme, rgl)

    if team.schedule_message_id is not None:
        try:
            await discord.edit_message(team.schedule_channel_id, team.schedule_message_id, payload)
            return team.schedule_message_id
        except MessageNotFound:
            logger.warning(
                "schedule message %s for team %s was deleted, sending a new one",
                team.schedule_message_id,
                team.id,
            )

    message_id = await discord.send_message(team.schedule_channel_id, payload)
    await set_schedule_message(db, team, message_id)
    return message_id
