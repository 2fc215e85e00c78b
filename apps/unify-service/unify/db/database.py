"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with sensible
test fallbacks (SQLite in-memory) and exposes FastAPI dependencies.
"""
import os
import sys
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test is running, so module
    import during collection is detected through ``sys.modules`` instead.
    ``PYTEST_RUNNING=1`` forces the check on.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    if "pytest" in sys.modules:
        return True
    return False


_POSTGRES_VARS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB")


def _get_database_url() -> str:
    """DATABASE_URL wins; otherwise the URL is assembled from POSTGRES_* parts."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    parts = {name: os.getenv(name) for name in _POSTGRES_VARS}
    missing = [name for name, value in parts.items() if not value]
    if missing:
        if _is_pytest_runtime():
            return SQLITE_MEMORY_URL
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return "postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}".format(**parts)


DATABASE_URL = _get_database_url()

# Test override strategy:
# 1. If UNIFY_TEST_DB is set, use it.
# 2. Else under pytest, force in-memory sqlite shared through a StaticPool.
explicit_test_db = os.getenv("UNIFY_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
    _sqlite_kwargs = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}
elif _is_pytest_runtime():
    DATABASE_URL = SQLITE_MEMORY_URL
    _sqlite_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
else:
    _sqlite_kwargs = {}


def _create_engine_with_fallback(url: str, kwargs: dict):
    """Create engine; under pytest fall back to in-memory sqlite when the URL is unusable."""
    try:
        return create_engine(url, **kwargs) if kwargs else create_engine(url)
    except OperationalError:
        if _is_pytest_runtime() and not explicit_test_db:
            return create_engine(
                SQLITE_MEMORY_URL,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        raise


engine = _create_engine_with_fallback(DATABASE_URL, _sqlite_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# SQLite has no migrations applied; create the schema once on first use.
_SCHEMA_INIT_DONE = False


def _ensure_sqlite_schema():
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    if str(engine.url).startswith("sqlite"):
        from unify.db import models  # local import to avoid circular import at module load
        models.Base.metadata.create_all(bind=engine)
    _SCHEMA_INIT_DONE = True


def get_db():
    """Dependency to get a database session."""
    _ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for background jobs (scheduler, workers) outside a request."""
    _ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
