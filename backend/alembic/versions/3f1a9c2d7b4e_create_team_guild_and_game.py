"""create team_guild and game

Revision ID: 3f1a9c2d7b4e
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b4e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "team_guild",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("rgl_team_id", sa.Integer(), nullable=True),
        sa.Column("game_format", sa.SmallInteger(), nullable=True),
        sa.Column("schedule_channel_id", sa.BigInteger(), nullable=True),
        sa.Column("schedule_message_id", sa.BigInteger(), nullable=True),
        sa.Column("serveme_api_key", sa.String(length=32), nullable=True),
        sa.Column("scrim_division", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "game",
        sa.Column("team_guild_id", sa.BigInteger(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reservation_id", sa.Integer(), nullable=True),
        sa.Column("server_ip_and_port", sa.Text(), nullable=True),
        sa.Column("server_password", sa.Text(), nullable=True),
        sa.Column("opponent_user_id", sa.BigInteger(), nullable=True),
        sa.Column("game_format", sa.SmallInteger(), nullable=True),
        sa.Column(
            "maps",
            postgresql.ARRAY(sa.Text()).with_variant(sa.JSON(none_as_null=True), "sqlite"),
            nullable=True,
        ),
        sa.Column("rgl_match_id", sa.Integer(), nullable=True),
        sa.CheckConstraint(
            "(server_ip_and_port IS NULL) = (server_password IS NULL)",
            name="ck_game_connect_info",
        ),
        sa.CheckConstraint(
            "reservation_id IS NULL OR server_ip_and_port IS NULL",
            name="ck_game_server_assignment",
        ),
        sa.CheckConstraint(
            "(rgl_match_id IS NOT NULL AND opponent_user_id IS NULL"
            " AND game_format IS NULL AND maps IS NULL)"
            " OR (rgl_match_id IS NULL AND opponent_user_id IS NOT NULL"
            " AND game_format IS NOT NULL AND maps IS NOT NULL)",
            name="ck_game_details",
        ),
        sa.ForeignKeyConstraint(["team_guild_id"], ["team_guild.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("team_guild_id", "timestamp"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("game")
    op.drop_table("team_guild")
