"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path, so tests never share
state and never touch ./data.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from moneyview.auth.models import User
from moneyview.auth.utils import hash_password
from moneyview.config import Settings
from moneyview.database import Base, build_engine, build_session_factory
from moneyview.income.cache import IncomeCache
from moneyview.main import create_app

# Registers every model on Base.metadata
import moneyview.business.models  # noqa: F401
import moneyview.customers.models  # noqa: F401
import moneyview.income.models  # noqa: F401
import moneyview.ledger.models  # noqa: F401

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/test.db",
        secret_key="test-secret-key",
        log_level="WARNING",
    )


# =============================================================================
# Service-level fixtures (direct AsyncSession)
# =============================================================================


@pytest.fixture
async def db(settings):
    engine = build_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session
    await engine.dispose()


async def _make_user(db, email: str) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        full_name=email.split("@")[0].title(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def user(db) -> User:
    return await _make_user(db, "owner@example.com")


@pytest.fixture
async def other_user(db) -> User:
    return await _make_user(db, "intruder@example.com")


@pytest.fixture
def cache() -> IncomeCache:
    return IncomeCache(ttl_seconds=300)


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client: TestClient, email: str = "owner@example.com") -> dict:
    client.post(
        "/api/auth/register",
        json={"email": email, "password": TEST_PASSWORD, "full_name": "Owner"},
    )
    response = client.post("/api/auth/login", json={"email": email, "password": TEST_PASSWORD})
    tokens = response.json()["data"]
    return {
        "headers": {"Authorization": f"Bearer {tokens['access_token']}"},
        "refresh_token": tokens["refresh_token"],
    }


@pytest.fixture
def auth(client) -> dict:
    return register_and_login(client)


@pytest.fixture
def auth_headers(auth) -> dict:
    return auth["headers"]


# =============================================================================
# Plain record factories for the pure engines
# =============================================================================


class Record:
    """Attribute bag standing in for ORM rows in pure-function tests."""

    def __init__(self, **fields):
        self.__dict__.update(fields)


def make_transaction(
    amount,
    type="credit",
    date=None,
    customer_id=None,
    customer_name="Acme Traders",
    description=None,
    balance_after=Decimal("0.00"),
    id=None,
) -> Record:
    return Record(
        id=id or uuid.uuid4(),
        amount=Decimal(str(amount)),
        type=type,
        date=date or datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc),
        customer_id=customer_id if customer_id is not None else "cust-1",
        customer_name=customer_name,
        description=description,
        balance_after=balance_after,
    )


def make_customer(opening_balance="0", created_at=None) -> Record:
    return Record(
        opening_balance=Decimal(str(opening_balance)),
        created_at=created_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def make_income(amount, month="June", type="credit", category="primary", status="received") -> Record:
    return Record(
        id=uuid.uuid4(),
        amount=Decimal(str(amount)),
        month=month,
        type=type,
        category=category,
        status=status,
    )
