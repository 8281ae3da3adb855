from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, event, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, MappedColumn, mapped_column

# Every money column: 12 integer digits, 2 decimal places
MONEY = Numeric(14, 2)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Microsecond-precision insert time; SQLite's CURRENT_TIMESTAMP stops at seconds."""
    return datetime.now(timezone.utc)


def money_column(**kwargs) -> MappedColumn[Decimal]:
    kwargs.setdefault("nullable", False)
    return mapped_column(MONEY, **kwargs)


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str):
    connect_args = {}
    is_sqlite = "sqlite" in database_url
    if is_sqlite:
        connect_args["check_same_thread"] = False

    engine = create_async_engine(database_url, echo=False, connect_args=connect_args)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)

    return engine


def build_session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)
