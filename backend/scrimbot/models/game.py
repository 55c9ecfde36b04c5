# One row per scheduled scrim or official match
from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    SmallInteger,
    Text,
)
from sqlalchemy.dialects.postgresql import ARRAY

from scrimbot.db.base import Base, UtcDateTime

MapList = ARRAY(Text).with_variant(JSON(none_as_null=True), "sqlite")


class Game(Base):
    __tablename__ = "game"

    team_guild_id = Column(
        BigInteger, ForeignKey("team_guild.id", ondelete="CASCADE"), primary_key=True
    )
    timestamp = Column(UtcDateTime(), primary_key=True)

    # server: hosted on a reservation, joined via connect info, or undecided
    reservation_id = Column(Integer)
    server_ip_and_port = Column(Text)
    server_password = Column(Text)

    # details: a scrim (opponent + format + maps) or an official match
    opponent_user_id = Column(BigInteger)
    game_format = Column(SmallInteger)
    maps = Column(MapList)
    rgl_match_id = Column(Integer)

    __table_args__ = (
        CheckConstraint(
            "(server_ip_and_port IS NULL) = (server_password IS NULL)",
            name="ck_game_connect_info",
        ),
        CheckConstraint(
            "reservation_id IS NULL OR server_ip_and_port IS NULL",
            name="ck_game_server_assignment",
        ),
        CheckConstraint(
            "(rgl_match_id IS NOT NULL AND opponent_user_id IS NULL"
            " AND game_format IS NULL AND maps IS NULL)"
            " OR (rgl_match_id IS NULL AND opponent_user_id IS NOT NULL"
            " AND game_format IS NOT NULL AND maps IS NOT NULL)",
            name="ck_game_details",
        ),
    )
