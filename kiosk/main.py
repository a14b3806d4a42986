import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from kiosk.api.routes import admin, checkin, metrics, ping, visitor
from kiosk.core.config import get_settings
from kiosk.core.logging import configure_logging, init_tracer, shutdown_tracer
from kiosk.storage import AttachmentStorage
from kiosk.tickets.repository import TicketRepository
from kiosk.tickets.service import TicketService

logger = logging.getLogger(__name__)


def _to_asyncpg_dsn(dsn: str) -> str:
    """Ensure a PostgreSQL DSN uses the asyncpg driver."""

    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://") :]
    return dsn


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    app.state.logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)
    app.state.tracer_provider = tracer_provider

    storage: AttachmentStorage = app.state.attachment_storage
    storage.ensure_directory()

    db_engine = create_async_engine(_to_asyncpg_dsn(settings.database_dsn), future=True)
    app.state.ticket_service = None
    try:
        session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
        repository = TicketRepository(session_factory, engine=db_engine)
        service = TicketService(repository, attachments=storage)
        await service.ensure_schema()
        app.state.ticket_service = service
    except Exception:
        logger.exception("Ticket store initialisation failed; ticket routes will return 503")
    try:
        yield
    finally:
        await db_engine.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    storage = AttachmentStorage(settings.upload_dir, url_prefix=settings.upload_url_prefix)
    app.state.attachment_storage = storage
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=storage.directory, check_dir=False),
        name="uploads",
    )
    app.include_router(ping.router)
    app.include_router(metrics.router)
    app.include_router(checkin.router)
    app.include_router(visitor.router)
    app.include_router(admin.router)
    return app


app = create_app()
