# ABOUTME: Pytest hooks and shared fixtures. Disables the on-disk result cache before engine/config load.
# ABOUTME: Loads .env so integration tests (e.g. test_evals) have GEMINI_API_KEY when run via pytest.

import os
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

load_dotenv()

# Read by core.config before any test imports rewrite_engine or api.main.
os.environ.setdefault("REWRITE_CACHE_ENABLED", "false")

from rewrite_engine.client import GenerationClient, StreamChunk, StreamDone  # noqa: E402


@pytest.fixture
def fake_client():
    """GenerationClient double; set generate.side_effect / return_value per test."""
    return MagicMock(spec=GenerationClient)


def _stream(*fragments: str):
    yield from (StreamChunk(f) for f in fragments)
    yield StreamDone("".join(fragments))


@pytest.fixture
def stream_of():
    """Factory for a generate_stream stand-in: yields the fragments, then the done signal."""
    return _stream
