import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from seat_booking.core.config import settings
from seat_booking.crud.seat_store import seat_store
from seat_booking.db.base import Base
import seat_booking.models  # noqa: F401
from seat_booking.services.pricing import PriceTable

SEAT_COUNT = 10


@pytest.fixture
async def db_engine(tmp_path):
    """Create a database engine for the tests.

    Function-scoped to ensure it's created in the same event loop as the test.
    Uses TEST_DATABASE_URL when set, a throwaway sqlite file otherwise.
    """
    test_db_url = settings.TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'seat_booking_test.db'}"
    engine = create_async_engine(
        test_db_url,
        echo=False,
        future=True
    )
    if engine.dialect.name == "sqlite":
        _serialize_sqlite_transactions(engine)

    # create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)  # Clean slate
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup: drop tables and dispose engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    """Factory to create one session per operation, as the API does per request."""
    return async_sessionmaker[AsyncSession](
        bind=db_engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False
    )


@pytest.fixture
def prices():
    return PriceTable(child=25, adult=50)


@pytest.fixture
async def provisioned_venue(db_session_factory, prices):
    """Seats 0..SEAT_COUNT-1, all free, and the default price rows."""
    async with db_session_factory() as session:
        async with session.begin():
            await seat_store.provision(session, seat_count=SEAT_COUNT, prices=prices.as_dict())
    return {"seat_count": SEAT_COUNT, "prices": prices}


@pytest.fixture
def run(db_session_factory):
    """Run a service call in its own session: `await run(service.method, *args)`."""
    async def _run(method, *args, **kwargs):
        async with db_session_factory() as session:
            return await method(session, *args, **kwargs)
    return _run


@pytest.fixture
def hold_seats(db_session_factory):
    """Assign seats directly in the store, bypassing the allocation rules."""
    async def _hold(customer, price_class, seat_numbers):
        async with db_session_factory() as session:
            async with session.begin():
                return await seat_store.assign_seats(session, customer, price_class, seat_numbers)
    return _hold


def _serialize_sqlite_transactions(engine):
    """
    sqlite has no row locks and ignores FOR UPDATE. Starting every transaction
    with BEGIN IMMEDIATE takes the write lock up front, so concurrent sessions
    wait for each other instead of failing with "database is locked".
    """
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
