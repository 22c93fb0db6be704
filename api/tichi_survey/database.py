import logging
import re
import time
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, UnboundExecutionError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()
SessionLocal = sessionmaker(autoflush=False, autocommit=False, expire_on_commit=False, future=True)
engine: Engine | None = None
_schema_ready = False


def mask_url(url: str) -> str:
    return re.sub(r"//[^:/@]+:[^@]+@", "//****:****@", url)


def init_engine(url: str, create_tables: bool = True, **engine_kwargs: Any) -> Engine:
    global engine, _schema_ready
    from . import models  # noqa: F401  registers the document table on Base

    engine_kwargs.setdefault("future", True)
    engine_kwargs.setdefault("pool_pre_ping", True)
    engine = create_engine(url, **engine_kwargs)
    SessionLocal.configure(bind=engine)
    _schema_ready = False
    if create_tables:
        ensure_schema()
    logger.info("[db] engine ready url=%s", mask_url(url))
    return engine


def ensure_schema() -> None:
    """Create the document table once the store accepts connections; safe to call per write."""
    global _schema_ready
    if _schema_ready:
        return
    if engine is None:
        raise UnboundExecutionError("No store engine configured")
    Base.metadata.create_all(bind=engine)
    _schema_ready = True


def store_ready() -> bool:
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except OperationalError:
        return False


def wait_for_db(url: str, max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    probe = create_engine(url, future=True)
    try:
        for attempt in range(1, max_attempts + 1):
            try:
                with probe.connect() as conn:
                    conn.execute(text("SELECT 1"))
                return
            except OperationalError as exc:
                last_err = exc
                logger.warning(
                    "[db] store not reachable (attempt %s/%s) url=%s error=%s",
                    attempt,
                    max_attempts,
                    mask_url(url),
                    exc.orig if exc.orig is not None else exc,
                )
                time.sleep(delay_seconds)
    finally:
        probe.dispose()
    if last_err:
        raise last_err
