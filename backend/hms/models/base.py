import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


def _enable_sqlite_locking(engine) -> None:
    """SQLite has no row locks; take the database write lock at BEGIN instead.

    With pysqlite's own transaction handling disabled, every transaction opens
    with BEGIN IMMEDIATE, so a read-check-write sequence cannot interleave with
    another writer. Foreign keys are switched on to match PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _enable_sqlite_locking(engine)
        return engine

    connect_args = {}
    if url.get_backend_name() == "postgresql":
        timeout_ms = settings.DB_STATEMENT_TIMEOUT_MS
        connect_args["options"] = f"-c statement_timeout={timeout_ms} -c lock_timeout={timeout_ms}"
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection() -> None:
    """Raise if the datastore cannot answer a trivial query."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def init_db() -> None:
    """Startup hook: fail fast when the datastore is unreachable."""
    check_connection()
    logger.info("Datastore connected (%s)", engine.url.render_as_string(hide_password=True))

    # Register every model with Base.metadata before create_all
    from . import (  # noqa: F401
        user, patient, doctor, staff, appointment, patient_history,
        room, medicine, admission,
    )

    if settings.AUTO_CREATE_TABLES:
        # NOTE: In production, run Alembic migrations instead of create_all()
        Base.metadata.create_all(bind=engine)

    from ..seed import seed_admin
    seed_admin()


def shutdown_db() -> None:
    """Shutdown hook: close pooled connections."""
    engine.dispose()
    logger.info("Datastore connection pool closed")
