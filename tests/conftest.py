import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slipgen.core.config import Settings
from slipgen.core.lease import RunLease
from slipgen.core.timing import VirtualClock
from slipgen.db import crud, models  # noqa: F401
from slipgen.db.base import Base
from slipgen.services.record_store import SqlRecordStore
from tests.factories import STANDARD_SLIP


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def settings():
    return Settings(browser_mode="mock", lease_backend="memory")


@pytest.fixture
def lease(settings, clock):
    return RunLease(ttl_seconds=settings.lease_ttl_seconds, clock=clock)


@pytest.fixture
def make_slip(session_factory):
    def _make(base: dict | None = None, **overrides) -> str:
        db = session_factory()
        try:
            slip = crud.create_slip(db, fields={**(base or STANDARD_SLIP), **overrides})
            db.commit()
            return str(slip.id)
        finally:
            db.close()

    return _make
