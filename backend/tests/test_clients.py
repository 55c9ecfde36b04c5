from datetime import timedelta

import httpx
import pytest

from conftest import MATCH_ID, OPPONENT_RGL_TEAM_ID, RGL_TEAM_ID, SEASON_ID, in_days
from scrimbot.core.constants import GameFormat
from scrimbot.core.errors import InvalidConnectCommand, TeamNotInMatch
from scrimbot.services.cache import SimpleTTLCache
from scrimbot.services.discord_client import DiscordClient, MessageNotFound
from scrimbot.services.rgl_client import RglClient
from scrimbot.services.serveme_client import ConnectInfo, ReservationStatus, ServemeClient


def serveme_client(fake):
    return ServemeClient("key", cache=SimpleTTLCache(), transport=httpx.MockTransport(fake.handler))


# --- connect info ---
def test_connect_info_parses_console_commands():
    info = ConnectInfo.parse('connect 1.2.3.4:27015; password "abc def"')
    assert info == ConnectInfo("1.2.3.4:27015", "abc def")

    info = ConnectInfo.parse("CONNECT chi.serveme.tf:27035;password scrim.x1")
    assert info == ConnectInfo("chi.serveme.tf:27035", "scrim.x1")


def test_connect_info_renders_console_command():
    info = ConnectInfo("chi.serveme.tf:27035", "scrim.x1")
    assert str(info) == 'connect chi.serveme.tf:27035; password "scrim.x1"'
    assert ConnectInfo.parse(str(info)) == info


@pytest.mark.parametrize(
    "command",
    ["1.2.3.4:27015", "connect 1.2.3.4:27015", 'connect 1.2.3.4:27015; password ""', ""],
)
def test_connect_info_rejects_garbage(command):
    with pytest.raises(InvalidConnectCommand):
        ConnectInfo.parse(command)


def test_reservation_status_parsing():
    assert ReservationStatus.parse("Waiting to start") is ReservationStatus.WAITING
    assert ReservationStatus.parse("Server updating, please be patient") is ReservationStatus.UPDATING
    assert ReservationStatus.parse("SDR Ready").is_ready
    assert ReservationStatus.parse("Ready").is_ready
    assert ReservationStatus.parse("Ended").is_terminal
    assert ReservationStatus.parse("something new") is ReservationStatus.UNKNOWN


# --- serveme ---
@pytest.mark.anyio
async def test_serveme_sends_token_header():
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={"servers": []})

    client = ServemeClient("abc123", cache=SimpleTTLCache(), transport=httpx.MockTransport(handler))
    start = in_days(1)
    assert await client.find_servers(start, start + timedelta(hours=1)) == []
    assert seen == ["Token token=abc123"]


@pytest.mark.anyio
async def test_get_reservation_is_cached(serveme):
    start = in_days(1)
    created = serveme.add_reservation(start, start + timedelta(hours=1), status="SDR Ready")
    client = serveme_client(serveme)

    first = await client.get_reservation(created["id"])
    second = await client.get_reservation(created["id"])

    assert first is second
    assert first.status is ReservationStatus.SDR_READY
    assert first.connect_info == ConnectInfo("chi.serveme.tf:27035", "scrim.pw")
    assert len(serveme.calls("GET", f"/reservations/{created['id']}")) == 1


@pytest.mark.anyio
async def test_edit_reservation_only_sends_given_fields(serveme):
    start = in_days(1)
    created = serveme.add_reservation(start, start + timedelta(hours=1))
    client = serveme_client(serveme)

    edited = await client.edit_reservation(created["id"], first_map="cp_sunshine")

    (_, _, body) = serveme.calls("PATCH")[0]
    assert body == {"reservation": {"first_map": "cp_sunshine"}}
    assert edited.first_map == "cp_sunshine"
    # the write refreshed the cache
    assert (await client.get_reservation(created["id"])).first_map == "cp_sunshine"


@pytest.mark.anyio
async def test_delete_reservation_invalidates_cache(serveme):
    start = in_days(1)
    created = serveme.add_reservation(start, start + timedelta(hours=1))
    client = serveme_client(serveme)

    await client.get_reservation(created["id"])
    assert await client.delete_reservation(created["id"]) is None

    with pytest.raises(httpx.HTTPStatusError):
        await client.get_reservation(created["id"])


@pytest.mark.anyio
async def test_cached_reservations_stay_with_their_api_key(serveme):
    start = in_days(1)
    created = serveme.add_reservation(start, start + timedelta(hours=1))

    def handler(request):
        if request.headers["Authorization"] != "Token token=team-a":
            return httpx.Response(404, json={"error": "not found"})
        return serveme.handler(request)

    cache = SimpleTTLCache()
    transport = httpx.MockTransport(handler)
    team_a = ServemeClient("team-a", cache=cache, transport=transport)
    team_b = ServemeClient("team-b", cache=cache, transport=transport)

    assert (await team_a.get_reservation(created["id"])).rcon == "scrim.rcon.secret"

    with pytest.raises(httpx.HTTPStatusError) as exc:
        await team_b.get_reservation(created["id"])
    assert exc.value.response.status_code == 404


@pytest.mark.anyio
async def test_list_maps_sorts_official_first(serveme):
    client = serveme_client(serveme)
    maps = await client.list_maps(GameFormat.SIXES)
    assert maps == ["cp_process_f12", "cp_sunshine", "koth_product_final", "cp_badlands"]


# --- rgl ---
@pytest.mark.anyio
async def test_rgl_match_and_season(rgl):
    client = RglClient(cache=SimpleTTLCache(), transport=httpx.MockTransport(rgl.handler))

    match = await client.get_match(MATCH_ID)
    assert match.season_id == SEASON_ID
    assert match.match_date == rgl.match_date
    assert match.map_names == ["koth_product_final", "cp_process_f12"]
    assert match.opponent_team(RGL_TEAM_ID).team_id == OPPONENT_RGL_TEAM_ID

    with pytest.raises(TeamNotInMatch):
        match.opponent_team(99)

    season = await client.get_season(SEASON_ID)
    assert season.format_name is GameFormat.SIXES

    await client.get_match(MATCH_ID)
    assert rgl.requests.count(f"/matches/{MATCH_ID}") == 1


@pytest.mark.anyio
async def test_rgl_errors_propagate(rgl):
    client = RglClient(cache=SimpleTTLCache(), transport=httpx.MockTransport(rgl.handler))
    with pytest.raises(httpx.HTTPStatusError):
        await client.get_team(404)


# --- discord ---
@pytest.mark.anyio
async def test_discord_send_and_edit(discord):
    client = DiscordClient(token="t", transport=httpx.MockTransport(discord.handler))

    message_id = await client.send_message(55, {"content": "hi"})
    await client.edit_message(55, message_id, {"content": "bye"})

    assert discord.messages[message_id] == {"content": "bye"}


@pytest.mark.anyio
async def test_discord_deleted_message_is_distinguished(discord):
    client = DiscordClient(token="t", transport=httpx.MockTransport(discord.handler))

    with pytest.raises(MessageNotFound):
        await client.edit_message(55, 12345, {"content": "bye"})


@pytest.mark.anyio
async def test_discord_other_errors_are_plain_status_errors():
    def handler(request):
        return httpx.Response(403, json={"message": "Missing Access", "code": 50001})

    client = DiscordClient(token="t", transport=httpx.MockTransport(handler))

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await client.send_message(55, {"content": "hi"})
    assert not isinstance(exc_info.value, MessageNotFound)
