from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from price_alerts.core.config import settings


engine = create_async_engine(
    settings.DB_URL,
    # echo=True,
)

async_session_maker = async_sessionmaker(
    bind=engine,
    expire_on_commit=False
)


class Base(DeclarativeBase):
    pass


# FastAPI dependency
async def get_async_session():
    async with async_session_maker() as session:
        yield session
