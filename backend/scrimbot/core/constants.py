from datetime import timedelta, time
from enum import Enum

from scrimbot.core.errors import UnknownGameFormat


class GameFormat(int, Enum):
    SIXES = 6
    HIGHLANDER = 9

    def __str__(self):
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: str) -> "GameFormat":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise UnknownGameFormat(name) from None


class GameKind(str, Enum):
    SCRIM = "scrim"
    MATCH = "match"

    @property
    def label(self) -> str:
        return "Scrim" if self is GameKind.SCRIM else "Official Match"


# how long a game is expected to run, before padding
GAME_DURATIONS = {
    GameKind.SCRIM: timedelta(hours=1),
    GameKind.MATCH: timedelta(hours=2),
}

# added on both ends of the booking window
RESERVATION_PADDING = timedelta(minutes=15)

RESERVATION_PASSWORD_LENGTH = 8
RESERVATION_RCON_LENGTH = 32

# "upcoming" games include ones that started this long ago
UPCOMING_GRACE = timedelta(hours=6)

# time slot suggestions can't be further in the past than this
TIME_SLOT_GRACE = timedelta(minutes=30)

# discord caps autocomplete responses at 25 choices
MAX_CHOICES = 25

SCHEDULE_DAYS = 8
DEFAULT_TIMES = (time(20, 30), time(21, 30), time(22, 30))

# discord json error code for "Unknown Message"
DISCORD_UNKNOWN_MESSAGE = 10008

# games shown in the published schedule
SCHEDULE_LIMIT = 25
