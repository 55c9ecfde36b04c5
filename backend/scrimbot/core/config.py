from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./scheduletf.db"
    SQL_ECHO: bool = False

    # discord.com
    DISCORD_BOT_TOKEN: str = ""
    DISCORD_API_BASE_URL: str = "https://discord.com/api/v10"

    # na.serveme.tf
    SERVEME_BASE_URL: str = "https://na.serveme.tf/api"
    PREFERRED_SERVER_PREFIXES: tuple[str, ...] = ("chi", "ks")

    # rgl.gg
    RGL_BASE_URL: str = "https://api.rgl.gg/v0"

    # games are scheduled and displayed in this time zone
    SCHEDULE_TIMEZONE: str = "America/New_York"

    # cache ttls in seconds
    RESERVATION_CACHE_TTL: int = 10
    LEAGUE_CACHE_TTL: int = 60 * 60
    MAP_CACHE_TTL: int = 24 * 60 * 60

    HTTP_TIMEOUT: float = 15

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
