from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scrimbot.core.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# fastapi dependency, one session per request
async def get_db():
    async with SessionLocal() as session:
        yield session
