from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from factories import FakeClock
from kiosk.metrics import MetricsRegistry
from kiosk.storage import AttachmentStorage
from kiosk.tickets.repository import TicketRepository
from kiosk.tickets.service import TicketService


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncEngine:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tickets.db'}")
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def repository(engine: AsyncEngine) -> TicketRepository:
    repository = TicketRepository(async_sessionmaker(engine, expire_on_commit=False), engine=engine)
    await repository.ensure_schema()
    return repository


@pytest.fixture
def storage(tmp_path) -> AttachmentStorage:
    return AttachmentStorage(tmp_path / "uploads", url_prefix="/uploads")


@pytest.fixture
def registry() -> MetricsRegistry:
    return MetricsRegistry()


@pytest.fixture
def service(
    repository: TicketRepository,
    storage: AttachmentStorage,
    registry: MetricsRegistry,
    clock: FakeClock,
) -> TicketService:
    return TicketService(repository, attachments=storage, metrics=registry, clock=clock)
