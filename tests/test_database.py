# ABOUTME: Pytest tests for the CachedRewrite SQLModel table and ResultCache on in-memory SQLite.
# ABOUTME: Verifies key stability, read-through miss/hit, upsert and failure-as-miss behavior.

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from core.database import CachedRewrite, ResultCache, cache_key


@pytest.fixture
def in_memory_engine():
    """Engine for in-memory SQLite; one DB per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def cache(in_memory_engine):
    return ResultCache(in_memory_engine)


def test_cache_key_is_stable_and_distinguishes_fields():
    assert cache_key("hi", "magic", "en") == cache_key("hi", "magic", "en")
    assert cache_key("hi", "magic", "en") != cache_key("hi", "magic", "fr")
    assert cache_key("hi", "magic", "en") != cache_key("hi", "poem", "en")
    assert cache_key("a\x1fb", "c", "auto") != cache_key("a", "b\x1fc", "auto")
    assert cache_key("hi", "magic", None) == cache_key("hi", "magic", "auto")


def test_cache_miss_returns_none(cache):
    assert cache.get("meeting tomorrow", "magic", "auto") is None


def test_cache_set_then_get(cache, in_memory_engine):
    cache.set("meeting tomorrow", "magic", "auto", "Meeting tomorrow.", 92)
    assert cache.get("meeting tomorrow", "magic", "auto") == "Meeting tomorrow."
    assert cache.get("meeting tomorrow", "magic", "de") is None

    with Session(in_memory_engine) as session:
        row = session.get(CachedRewrite, cache_key("meeting tomorrow", "magic", "auto"))
    assert row.preset_id == "magic"
    assert row.language == "auto"
    assert row.quality_score == 92
    assert row.created_at is not None


def test_cache_set_overwrites_existing_entry(cache):
    cache.set("meeting tomorrow", "magic", "auto", "First.", 70)
    cache.set("meeting tomorrow", "magic", "auto", "Second.", 88)
    assert cache.get("meeting tomorrow", "magic", "auto") == "Second."


def test_cache_read_failure_is_a_miss(cache):
    with patch("core.database.Session.get", side_effect=OperationalError("SELECT", {}, Exception("locked"))):
        assert cache.get("meeting tomorrow", "magic", "auto") is None


def test_cache_write_failure_is_skipped(cache):
    with patch("core.database.Session.commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
        cache.set("meeting tomorrow", "magic", "auto", "Meeting tomorrow.", 92)
    assert cache.get("meeting tomorrow", "magic", "auto") is None
