# ABOUTME: SQLModel result-cache table and SQLite session factory.
# ABOUTME: ResultCache is read-through on request start and write-through on accepted results; failures count as misses.

import hashlib
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine

from core.config import CACHE_DB_PATH

_KEY_SEPARATOR = "\x1f"


class CachedRewrite(SQLModel, table=True):
    """Final accepted output for one (text, preset_id, language) triple."""

    __tablename__ = "rewrite_cache"

    key: str = Field(primary_key=True)
    preset_id: str = Field(index=True)
    language: str
    output: str
    quality_score: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


_engine = create_engine(
    f"sqlite:///{CACHE_DB_PATH}",
    connect_args={"check_same_thread": False},
)


def init_db(engine: Engine | None = None) -> None:
    """Create all tables if they do not exist."""
    SQLModel.metadata.create_all(engine or _engine)


@contextmanager
def get_session(engine: Engine | None = None):
    """Yield an SQLite session for the given engine (default: the on-disk cache)."""
    engine = engine or _engine
    init_db(engine)
    with Session(engine) as session:
        yield session


def cache_key(text: str, preset_id: str, language: str) -> str:
    """Stable digest of the request triple."""
    raw = _KEY_SEPARATOR.join((text, preset_id, language or "auto"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ResultCache:
    """Persistent cache of accepted rewrite outputs."""

    def __init__(self, engine: Engine | None = None):
        self._engine = engine

    def get(self, text: str, preset_id: str, language: str) -> str | None:
        try:
            with get_session(self._engine) as session:
                row = session.get(CachedRewrite, cache_key(text, preset_id, language))
                return row.output if row else None
        except SQLAlchemyError:
            logging.exception("result cache read failed; treating as miss")
            return None

    def set(
        self,
        text: str,
        preset_id: str,
        language: str,
        output: str,
        quality_score: int,
    ) -> None:
        key = cache_key(text, preset_id, language)
        try:
            with get_session(self._engine) as session:
                row = session.get(CachedRewrite, key)
                if row is None:
                    row = CachedRewrite(
                        key=key,
                        preset_id=preset_id,
                        language=language or "auto",
                        output=output,
                        quality_score=quality_score,
                    )
                else:
                    row.output = output
                    row.quality_score = quality_score
                    row.created_at = datetime.now(timezone.utc)
                session.add(row)
                session.commit()
        except SQLAlchemyError:
            logging.exception("result cache write failed; skipping")
