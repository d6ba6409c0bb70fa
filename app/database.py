"""Database engine and session management"""

from typing import AsyncGenerator

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()

# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}
UNIQUE_VIOLATION = "23505"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for the request"""
    async with SessionLocal() as session:
        yield session


def _sqlstate(error: DBAPIError):
    return getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)


def is_unique_violation(error: IntegrityError) -> bool:
    sqlstate = _sqlstate(error)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    # SQLite only reports the constraint kind in the message
    return str(error.orig).startswith("UNIQUE constraint failed")


def is_concurrency_failure(error: Exception) -> bool:
    """Whether ``error`` means another transaction won a race and a retry may succeed.

    Only unique violations count among integrity errors: a concurrent insert
    can take a key this transaction checked as free. Check and foreign key
    violations fail the same way on every retry.
    """
    if isinstance(error, StaleDataError):
        return True
    if isinstance(error, IntegrityError):
        return is_unique_violation(error)
    if isinstance(error, DBAPIError):
        return _sqlstate(error) in CONFLICT_SQLSTATES
    return False
