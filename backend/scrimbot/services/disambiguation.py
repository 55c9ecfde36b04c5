# Autocomplete: turn a partially typed day/time, reservation id or map list
# into at most 25 concrete choices.
from datetime import datetime
from typing import NamedTuple

from scrimbot.core.clock import local_datetime, now_utc, relative_string
from scrimbot.core.constants import MAX_CHOICES, TIME_SLOT_GRACE, GameFormat
from scrimbot.services.aliases import (
    DEFAULT_TIME_CHOICES,
    TIME_CHOICES,
    day_choices,
    matches_datetime,
    split_datetime_query,
)
from scrimbot.services.games import Hosted, ScheduledGame
from scrimbot.services.map_catalog import (
    has_trailing_separator,
    is_official,
    parse_map_list,
)


class Choice(NamedTuple):
    name: str
    value: str | int


def _take(items, limit: int = MAX_CHOICES) -> list:
    out = []
    for item in items:
        if len(out) >= limit:
            break
        out.append(item)
    return out


# --- games ---
def match_games(games, query: str | None, now: datetime | None = None) -> list[ScheduledGame]:
    parsed = split_datetime_query(query)
    return _take(g for g in games if matches_datetime(g.timestamp, parsed, now))


def game_label(game: ScheduledGame, now: datetime | None = None, opponent: str | None = None) -> str:
    label = f"{relative_string(game.timestamp, now)}: {game.kind.label}"
    if opponent:
        label += f" vs. {opponent}"
    return label


def game_choices(games, query: str | None, now: datetime | None = None, opponents=None) -> list[Choice]:
    """
    `opponents` optionally maps a game's timestamp to a display name for
    the other team.
    """
    opponents = opponents or {}
    return [
        Choice(
            game_label(g, now, opponents.get(g.timestamp)),
            int(g.timestamp.timestamp()),
        )
        for g in match_games(games, query, now)
    ]


# --- free time slots ---
def time_slot_choices(query: str | None, taken, now: datetime | None = None) -> list[Choice]:
    now = now or now_utc()
    parsed = split_datetime_query(query)
    taken = set(taken)
    earliest = now - TIME_SLOT_GRACE

    dates = [d for d, aliases in day_choices(now) if any(a.startswith(parsed.day) for a in aliases)]

    matching_times = [
        t for t, aliases in TIME_CHOICES if any(a.startswith(parsed.time) for a in aliases)
    ]

    if not dates:
        candidates = []
    elif len(dates) == 1:
        candidates = (local_datetime(dates[0], t) for t in matching_times)
    elif not parsed.time:
        candidates = (local_datetime(d, t) for d in dates for t in DEFAULT_TIME_CHOICES)
    else:
        candidates = (local_datetime(d, t) for d in dates for t in matching_times)

    slots = _take(dt for dt in candidates if dt not in taken and dt >= earliest)
    return [Choice(relative_string(dt, now), int(dt.timestamp())) for dt in slots]


# --- reservations ---
def reservation_choices(games, query: str | None, now: datetime | None = None) -> list[Choice]:
    """
    Group hosted games by reservation. A group matches when some member's
    day and some member's time match, or when the reservation id starts
    with the query.
    """
    parsed = split_datetime_query(query)

    groups: dict[int, list[ScheduledGame]] = {}
    for game in sorted(games, key=lambda g: g.timestamp):
        if isinstance(game.server, Hosted):
            groups.setdefault(game.server.reservation_id, []).append(game)

    def group_matches(reservation_id: int, members) -> bool:
        if str(reservation_id).startswith(parsed.raw):
            return True

        day_matches = any(
            matches_datetime(g.timestamp, parsed._replace(time=""), now) for g in members
        )
        time_matches = any(
            matches_datetime(g.timestamp, parsed._replace(day=""), now) for g in members
        )
        return day_matches and time_matches

    matched = _take(
        (rid, members) for rid, members in sorted(groups.items()) if group_matches(rid, members)
    )

    return [
        Choice(
            f"{rid} ({', '.join(relative_string(g.timestamp, now) for g in members)})",
            rid,
        )
        for rid, members in matched
    ]


# --- maps ---
def _map_choice(maps) -> Choice:
    return Choice(", ".join(maps), ",".join(maps))


def _official_combinations(slots, official) -> list[list[str]]:
    """
    Every tuple of official maps consistent with the typed slots, where
    each slot is a case-insensitive substring filter. Built one slot at a
    time and cut to the choice limit after each step.
    """
    combos = [[]]
    for slot in slots:
        candidates = [m for m in official if slot.lower() in m.lower()]
        if not candidates:
            return []
        combos = _take(combo + [m] for combo in combos for m in candidates)
    return combos


def map_choices(query: str | None, catalog, game_format: GameFormat | None = None) -> list[Choice]:
    query = query or ""
    typed = parse_map_list(query)

    if not typed:
        return [_map_choice([m]) for m in _take(catalog)]

    if has_trailing_separator(query):
        return [_map_choice(typed + [m]) for m in _take(catalog)]

    official = [m for m in catalog if is_official(m, game_format)]
    other = [m for m in catalog if not is_official(m, game_format)]

    combos = _official_combinations(typed, official)

    *prefix, last = typed
    combos += [prefix + [m] for m in other if last.lower() in m.lower()]

    return [_map_choice(c) for c in _take(combos)]
