import pytest

from conftest import MATCH_ID, TEAM_ID, in_days
from scrimbot.api.deps import get_team
from scrimbot.models.team_guild import TeamGuild

START = in_days(2)
UNIX = int(START.timestamp())
BASE = f"/teams/{TEAM_ID}"


def configure(client, **config):
    res = client.patch(f"{BASE}/config", json=config)
    assert res.status_code == 200
    return res.json()


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_config_round_trip_masks_api_key(client):
    assert client.get(f"{BASE}/config").json()["game_format"] is None

    data = configure(client, game_format="highlander", serveme_api_key="abcdef", rgl_team_id=11)

    assert data["game_format"] == "Highlander"
    assert data["serveme_api_key"] == "******"
    assert client.get(f"{BASE}/config").json()["rgl_team_id"] == 11


def test_unknown_format_is_rejected(client):
    res = client.patch(f"{BASE}/config", json={"game_format": "ultiduo"})
    assert res.status_code == 409
    assert "ultiduo" in res.json()["detail"]


def test_join_list_and_cancel(client, discord):
    configure(client, game_format="sixes", schedule_channel_id=555)

    res = client.post(
        f"{BASE}/scrims/join",
        json={
            "timestamp": START.isoformat(),
            "opponent_user_id": 42,
            "maps": "cp_process_f12, cp_sunshine",
            "connect_info": 'connect 1.2.3.4:27015; password "pw"',
        },
    )
    assert res.status_code == 200
    game = res.json()
    assert game["kind"] == "scrim"
    assert game["maps"] == ["cp_process_f12", "cp_sunshine"]
    assert game["server"] == {
        "state": "joined",
        "reservation_id": None,
        "connect": 'connect 1.2.3.4:27015; password "pw"',
    }
    assert len(discord.sent) == 1

    listing = client.get(f"{BASE}/games").json()
    assert listing["count"] == 1

    assert client.get(f"{BASE}/games/{UNIX}").json()["opponent_user_id"] == 42

    res = client.patch(f"{BASE}/games/{UNIX}/opponent", json={"opponent_user_id": 7})
    assert res.json()["opponent_user_id"] == 7

    assert client.delete(f"{BASE}/games/{UNIX}").status_code == 200
    assert client.get(f"{BASE}/games").json()["count"] == 0


def test_double_booking_conflicts(client):
    configure(client, game_format="sixes")
    body = {"timestamp": START.isoformat(), "opponent_user_id": 42}

    assert client.post(f"{BASE}/scrims/join", json=body).status_code == 200
    res = client.post(f"{BASE}/scrims/join", json=body)

    assert res.status_code == 409
    assert res.json()["detail"] == "a game is already scheduled at that time"


def test_missing_game_is_404(client):
    res = client.get(f"{BASE}/games/{UNIX}")
    assert res.status_code == 404
    assert res.json()["detail"] == "game not found"


def test_host_without_api_key_is_409(client):
    configure(client, game_format="sixes")
    res = client.post(
        f"{BASE}/scrims/host", json={"timestamp": START.isoformat(), "opponent_user_id": 42}
    )
    assert res.status_code == 409
    assert client.get(f"{BASE}/games").json()["count"] == 0


def test_bad_connect_info_is_409(client):
    configure(client, game_format="sixes")
    res = client.post(
        f"{BASE}/scrims/join",
        json={"timestamp": START.isoformat(), "opponent_user_id": 42, "connect_info": "nope"},
    )
    assert res.status_code == 409


def test_host_match(client, serveme):
    configure(client, serveme_api_key="key", rgl_team_id=11)

    res = client.post(f"{BASE}/matches/host", json={"match_id": MATCH_ID})
    assert res.status_code == 200
    game = res.json()

    assert game["kind"] == "match"
    assert game["match_id"] == MATCH_ID
    assert game["server"]["state"] == "hosted"
    assert game["server"]["reservation_id"] in serveme.reservations


def test_league_errors_are_502(client):
    configure(client, rgl_team_id=11)
    res = client.post(f"{BASE}/matches/join", json={"match_id": 404})
    assert res.status_code == 502


def test_schedule_refresh_needs_channel(client):
    assert client.post(f"{BASE}/schedule/refresh").status_code == 409

    configure(client, schedule_channel_id=555)
    res = client.post(f"{BASE}/schedule/refresh")
    assert res.status_code == 200
    assert res.json()["status"] == "success"


def test_autocomplete_times_and_maps(client):
    res = client.get(f"{BASE}/autocomplete/times", params={"q": "tmrw"})
    assert len(res.json()["choices"]) == 25

    configure(client, serveme_api_key="key", game_format="sixes")
    res = client.get(f"{BASE}/autocomplete/maps", params={"q": "proc"})
    assert res.json()["choices"] == [{"name": "cp_process_f12", "value": "cp_process_f12"}]


def test_autocomplete_games(client):
    configure(client, game_format="sixes")
    client.post(f"{BASE}/scrims/join", json={"timestamp": START.isoformat(), "opponent_user_id": 42})

    choices = client.get(f"{BASE}/autocomplete/games").json()["choices"]
    assert [c["value"] for c in choices] == [UNIX]
    assert ": Scrim" in choices[0]["name"]


@pytest.mark.anyio
async def test_team_from_a_read_only_request_is_kept(session_factory):
    async with session_factory() as db:
        team = await get_team(TEAM_ID, db)
    assert team.id == TEAM_ID

    async with session_factory() as db:
        assert await db.get(TeamGuild, TEAM_ID) is not None
