"""
Async database engine and session management.

Purpose:
- Create SQLAlchemy async engine from settings.DATABASE_URL
- Provide async session factory for the SQL store
- Provide Base declarative class for ORM models

When DATABASE_URL is "disabled" no engine is created and the bot runs on
the in-memory store instead.
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from config.settings import settings
import logging
from typing import Optional

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def db_enabled() -> bool:
	return bool(settings.DATABASE_URL) and settings.DATABASE_URL != "disabled"


def make_session_maker(url: str, echo: bool = False):
	"""Build an (engine, sessionmaker) pair for the given async URL."""
	new_engine = create_async_engine(url, echo=echo, future=True)
	maker = async_sessionmaker(new_engine, expire_on_commit=False, class_=AsyncSession)
	return new_engine, maker


if db_enabled():
	engine, async_session_maker = make_session_maker(settings.DATABASE_URL, echo=settings.DEBUG)
	logger.info("Async DB engine created")
else:
	logger.warning("DATABASE_URL is 'disabled' – DB engine will not be created; using in-memory store.")


async def create_schema(target_engine=None) -> None:
	"""Create all tables (used by tests and first-run setups without alembic)."""
	# models must be imported so their tables register on Base.metadata
	import models.db_models  # noqa: F401

	target_engine = target_engine or engine
	if target_engine is None:
		return
	async with target_engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)

