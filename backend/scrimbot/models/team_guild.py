# Per-guild team configuration, created lazily the first time a guild is seen
from sqlalchemy import BigInteger, Column, Integer, SmallInteger, String, Text

from scrimbot.db.base import Base


class TeamGuild(Base):
    __tablename__ = "team_guild"

    id = Column(BigInteger, primary_key=True)  # discord guild id
    rgl_team_id = Column(Integer)
    game_format = Column(SmallInteger)  # default for scrims, 6 or 9
    schedule_channel_id = Column(BigInteger)
    schedule_message_id = Column(BigInteger)
    serveme_api_key = Column(String(32))
    scrim_division = Column(Text)
