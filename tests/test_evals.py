# ABOUTME: Live integration evals for rewrite and extraction; real Gemini calls, GEMINI_API_KEY required.
# ABOUTME: Deselected by default (addopts). Run: pytest tests/test_evals.py -m integration.

import pytest

from core.schemas import OutcomeType, PipelineState
from rewrite_engine.pipeline import extract_insight_action, extract_outcomes, rewrite
from rewrite_engine.structured import VALID_OUTCOME_TYPES

_FILLER_OPENERS = ("Sure", "Here is")


@pytest.mark.integration
def test_evals_magic_keeps_time_and_items():
    """'meeting tomorrow 2pm discuss Q4 numbers bring laptop' keeps the time and the laptop, no filler opener."""
    result = rewrite("meeting tomorrow 2pm discuss Q4 numbers bring laptop", "magic")
    assert "2" in result.text
    assert "pm" in result.text.lower()
    assert "laptop" in result.text.lower()
    for opener in _FILLER_OPENERS:
        assert not result.text.startswith(opener)


@pytest.mark.integration
def test_evals_outcomes_message_and_task():
    """Email-John-and-groceries input yields a message about John/budget and a task about groceries."""
    result = extract_outcomes(
        "I need to email John about the budget and also remember to pick up groceries"
    )
    assert len(result.outcomes) >= 2
    assert all(o.type.value in VALID_OUTCOME_TYPES for o in result.outcomes)
    assert any(
        o.type is OutcomeType.MESSAGE
        and ("john" in o.text.lower() or "budget" in o.text.lower())
        for o in result.outcomes
    )
    assert any(
        o.type is OutcomeType.TASK and "groceries" in o.text.lower()
        for o in result.outcomes
    )


@pytest.mark.integration
def test_evals_unstuck_returns_pair():
    result = extract_insight_action(
        "I have a presentation on Friday and I keep rewriting the first slide instead of doing the rest"
    )
    assert result.insight
    assert result.action
    assert result.status in (PipelineState.ACCEPTED, PipelineState.ACCEPTED_DEGRADED)


@pytest.mark.integration
@pytest.mark.extra_evals
def test_evals_language_override():
    """Language directive: English input, Spanish output."""
    result = rewrite("running late, be there in 20 minutes", "quick_reply", "es")
    assert result.text
    assert result.quality_score >= 0


@pytest.mark.integration
@pytest.mark.extra_evals
def test_evals_email_professional_has_greeting():
    result = rewrite("project delayed two weeks because of api issues", "email_professional")
    assert result.text.split()[0].rstrip(",").lower() in ("hi", "hello", "hey", "dear", "good")
