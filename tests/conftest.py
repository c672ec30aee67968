"""
Shared pytest fixtures for the gas ledger tests.

API tests run against a fresh temporary SQLite database per test (auto-cleaned
by pytest) with the app's session dependency overridden.
"""

import asyncio
import os
import uuid
from datetime import timedelta

# The app engine is built at import time; keep it off any real database.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from db.database import Base, Bottle, Gas, Transaction, get_async_session
from main import app
from tests.factories import T0


# ---------------------------------------------------------------------------
# Database / API fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session_maker(tmp_path):
    """Session factory bound to a temporary SQLite database with all tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def client(session_maker):
    async def _session_override():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed_bottle(session_maker):
    """Insert a bottle (and its history) directly, bypassing the API.

    Lets tests set an opening balance or leave the bottle without a direct gas,
    neither of which the transaction endpoint does.
    """
    def _seed(serial, opening_balance_kg=None, gas_code=None, transactions=()):
        async def _run():
            async with session_maker() as db:
                codes = {gas_code} | {t[2] for t in transactions}
                for code in sorted(c for c in codes if c):
                    db.add(Gas(code=code, name=code))
                bottle = Bottle(
                    id=uuid.uuid4(),
                    serial=serial,
                    opening_balance_kg=opening_balance_kg,
                    gas_code=gas_code,
                )
                db.add(bottle)
                for i, (t_type, qty, t_gas) in enumerate(transactions):
                    db.add(Transaction(
                        id=uuid.uuid4(),
                        bottle_id=bottle.id,
                        transaction_type=t_type,
                        quantity_kg=qty,
                        gas_code=t_gas,
                        occurred_at=T0 + timedelta(hours=i),
                    ))
                await db.commit()
                return bottle.id

        return asyncio.run(_run())

    return _seed


@pytest.fixture
def break_session(client, session_maker):
    """Make one AsyncSession method raise for every request, as a failing store would."""
    def _break(method_name, error=RuntimeError("database unavailable")):
        async def _fail(*args, **kwargs):
            raise error

        async def _session_override():
            async with session_maker() as session:
                setattr(session, method_name, _fail)
                yield session

        app.dependency_overrides[get_async_session] = _session_override

    return _break
