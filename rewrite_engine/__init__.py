# ABOUTME: Text rewriting engine package; exposes the public rewrite and extraction operations.
# ABOUTME: Use rewrite_engine.pipeline directly when you need to pass a client or cache.

from rewrite_engine.pipeline import (
    extract_insight_action,
    extract_outcomes,
    extract_smart_actions,
    rewrite,
    rewrite_stream,
)

__all__ = [
    "extract_insight_action",
    "extract_outcomes",
    "extract_smart_actions",
    "rewrite",
    "rewrite_stream",
]
