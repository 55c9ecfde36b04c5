# Errors raised by scheduling operations. Everything here is safe to show to
# the person who ran the command; httpx errors from external services are
# propagated as-is and never wrapped.


class BotError(Exception):
    message = "something went wrong"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# --- not found ---
class NotFoundError(BotError):
    message = "not found"


class GameNotFound(NotFoundError):
    message = "game not found"


class NoActiveGames(NotFoundError):
    message = "no active games with a ready reservation"


# --- precondition ---
class PreconditionError(BotError):
    message = "precondition failed"


class TimeSlotTaken(PreconditionError):
    message = "a game is already scheduled at that time"


class GameNotHosted(PreconditionError):
    message = "game is not hosted on a reservation"


class NoServemeApiKey(PreconditionError):
    message = "na.serveme.tf API key not set. set it in the team configuration."


class NoRglTeam(PreconditionError):
    message = "RGL team not set. set it in the team configuration."


class NoGameFormat(PreconditionError):
    message = "no game format given and no default game format set"


class NoScheduleChannel(PreconditionError):
    message = "schedule channel not set. set it in the team configuration."


class NoServemeServers(PreconditionError):
    message = "no na.serveme.tf servers available for that time"


class InvalidConnectCommand(PreconditionError):
    message = 'connect info must look like `connect <ip:port>; password "<password>"`'


class TeamNotInMatch(PreconditionError):
    message = "team is not playing in that match"


class UnknownGameFormat(PreconditionError):
    def __init__(self, name: str):
        super().__init__(f"unknown game format: {name!r}")


# --- corrupt state ---
class CorruptStateError(BotError):
    message = "stored game is in an invalid state"


class InvalidGameDetails(CorruptStateError):
    message = "stored game is neither a scrim nor a match"


class InvalidServerAssignment(CorruptStateError):
    message = "stored game has both a reservation and connect info"
