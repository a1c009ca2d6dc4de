# ABOUTME: Pytest tests for the public operations: rewrite, rewrite_stream and the three extraction operations.
# ABOUTME: GenerationClient and ResultCache are MagicMocks; telemetry log_run is patched where its calls are asserted.

import json
from unittest.mock import MagicMock, patch

import pytest

from core.database import ResultCache
from core.errors import ExtractionFailed, GenerationError, RequestError
from core.schemas import OutcomeType, PipelineState, SmartActionType
from rewrite_engine.client import StreamChunk
from rewrite_engine.pipeline import (
    extract_insight_action,
    extract_outcomes,
    extract_smart_actions,
    rewrite,
    rewrite_stream,
)

GOOD_EMAIL = (
    "Hi Sam,\n\nThe report is two days late. I will send it on Friday morning.\n\nThanks,\n[Name]"
)
GOOD_TEXT = "Meeting tomorrow at 2 PM to discuss the Q4 numbers. Bring your laptop."


@pytest.fixture
def fake_cache():
    cache = MagicMock(spec=ResultCache)
    cache.get.return_value = None
    return cache


@pytest.mark.parametrize("text", ["", "   ", None, 12])
def test_rewrite_bad_text_raises_before_backend_call(fake_client, text):
    """Empty or non-string text is a RequestError with zero backend calls."""
    with pytest.raises(RequestError):
        rewrite(text, "magic", client=fake_client)
    assert fake_client.generate.call_count == 0


@pytest.mark.parametrize("preset_id", [None, 5, ["magic"], ""])
def test_rewrite_bad_preset_type_raises(fake_client, preset_id):
    with pytest.raises(RequestError):
        rewrite("hello there", preset_id, client=fake_client)
    fake_client.generate.assert_not_called()


def test_rewrite_too_long_text_raises(fake_client):
    with pytest.raises(RequestError):
        rewrite("x" * 100_000, "magic", client=fake_client)


def test_rewrite_bad_context_raises(fake_client):
    with pytest.raises(RequestError):
        rewrite("hello there", "magic", context="not a list", client=fake_client)


def test_rewrite_filler_is_stripped_before_validation(fake_client):
    """A backend that always says 'Sure! Here is your text: Hello.' yields just 'Hello.'."""
    fake_client.generate.return_value = "Sure! Here is your text: Hello."
    result = rewrite("say hello to the client", "email_professional", client=fake_client)
    assert result.text == "Hello."
    assert "Sure" not in result.text
    assert "Here is" not in result.text
    assert result.quality_score == 55
    assert result.was_improved is False
    assert result.status is PipelineState.ACCEPTED_DEGRADED
    assert fake_client.generate.call_count == 2


def test_rewrite_valid_output_skips_correction(fake_client):
    fake_client.generate.return_value = GOOD_TEXT
    result = rewrite("meeting tomorrow 2pm discuss Q4 numbers bring laptop", "magic", client=fake_client)
    assert result.text == GOOD_TEXT
    assert result.quality_score == 100
    assert result.status is PipelineState.ACCEPTED
    assert result.cached is False
    fake_client.generate.assert_called_once()
    messages, params = fake_client.generate.call_args.args
    assert messages[-1].content == "meeting tomorrow 2pm discuss Q4 numbers bring laptop"
    assert params.temperature == 0.75


def test_rewrite_uses_correction_when_better(fake_client):
    fake_client.generate.side_effect = ["Hello.", GOOD_EMAIL]
    result = rewrite("report is late, will send friday", "email_professional", client=fake_client)
    assert result.text == GOOD_EMAIL
    assert result.was_improved is True
    assert result.quality_score == 100
    assert result.status is PipelineState.ACCEPTED


def test_rewrite_unknown_preset_falls_back_to_magic(fake_client):
    fake_client.generate.return_value = GOOD_TEXT
    rewrite("meeting tomorrow", "no_such_preset", client=fake_client)
    system = fake_client.generate.call_args.args[0][0].content
    assert "ACTIVE PRESET: MAGIC" in system


def test_rewrite_generation_error_propagates(fake_client):
    fake_client.generate.side_effect = GenerationError("network down")
    with pytest.raises(GenerationError):
        rewrite("meeting tomorrow", "magic", client=fake_client)


def test_rewrite_output_empty_after_cleanup_is_generation_error(fake_client):
    fake_client.generate.return_value = "Sure! Hope this helps!"
    with pytest.raises(GenerationError):
        rewrite("meeting tomorrow", "magic", client=fake_client)


def test_rewrite_cache_hit_skips_generation(fake_client, fake_cache):
    fake_cache.get.return_value = "Sure! Cached answer."
    result = rewrite("meeting tomorrow", "magic", "auto", client=fake_client, cache=fake_cache)
    assert result.text == "Cached answer."
    assert result.cached is True
    assert result.quality_score == 100
    fake_client.generate.assert_not_called()
    fake_cache.get.assert_called_once_with("meeting tomorrow", "magic", "auto")


def test_rewrite_caches_only_accepted_results(fake_client, fake_cache):
    fake_client.generate.return_value = GOOD_TEXT
    rewrite("meeting tomorrow", "magic", client=fake_client, cache=fake_cache)
    fake_cache.set.assert_called_once_with("meeting tomorrow", "magic", "auto", GOOD_TEXT, 100)

    fake_cache.set.reset_mock()
    fake_client.generate.side_effect = None
    fake_client.generate.return_value = "Hello."
    rewrite("say hello", "email_professional", client=fake_client, cache=fake_cache)
    fake_cache.set.assert_not_called()


def test_rewrite_with_context_bypasses_cache(fake_client, fake_cache):
    fake_client.generate.return_value = GOOD_TEXT
    rewrite("and then", "magic", context=["earlier part"], client=fake_client, cache=fake_cache)
    fake_cache.get.assert_not_called()
    fake_cache.set.assert_not_called()
    system = fake_client.generate.call_args.args[0][0].content
    assert "[1] earlier part" in system


def test_rewrite_extraction_preset_returns_json_text(fake_client):
    fake_client.generate.return_value = json.dumps(
        {"outcomes": [{"type": "task", "text": "Pick up groceries"}]}
    )
    result = rewrite("pick up groceries", "outcomes", client=fake_client)
    assert json.loads(result.text) == {"outcomes": [{"type": "task", "text": "Pick up groceries"}]}
    assert result.status is PipelineState.ACCEPTED


def test_rewrite_logs_run_telemetry(fake_client):
    fake_client.generate.return_value = GOOD_TEXT
    with patch("rewrite_engine.pipeline.log_run") as mock_log_run:
        rewrite("meeting tomorrow", "magic", client=fake_client)
    mock_log_run.assert_called_once()
    kwargs = mock_log_run.call_args.kwargs
    assert kwargs["operation"] == "rewrite"
    assert kwargs["success"] is True
    assert kwargs["status"] == "accepted"
    assert kwargs["attempts"] == 1


def test_rewrite_stream_bad_request_raises_synchronously(fake_client):
    """RequestError surfaces on the call itself, before any event is produced."""
    with pytest.raises(RequestError):
        rewrite_stream("", "magic", client=fake_client)
    fake_client.generate_stream.assert_not_called()


def test_rewrite_stream_chunks_then_done(fake_client, stream_of):
    fake_client.generate_stream.return_value = stream_of("Meeting tomorrow at 2 PM ", "to discuss the Q4 numbers. ", "Bring your laptop.")
    events = list(rewrite_stream("meeting tomorrow 2pm", "magic", client=fake_client))
    chunks = [e["chunk"] for e in events if e["type"] == "chunk"]
    assert "".join(chunks) == GOOD_TEXT
    done = events[-1]
    assert done["type"] == "done"
    assert done["text"] == GOOD_TEXT
    assert done["quality_score"] == 100
    assert done["status"] == "accepted"
    assert all(e["type"] == "chunk" for e in events[:-1])


def test_rewrite_stream_sanitizes_after_last_fragment(fake_client, stream_of):
    fake_client.generate_stream.return_value = stream_of("Sure! ", GOOD_TEXT)
    events = list(rewrite_stream("meeting tomorrow 2pm", "magic", client=fake_client))
    assert events[0] == {"type": "chunk", "chunk": "Sure! "}
    assert events[-1]["text"] == GOOD_TEXT


def test_rewrite_stream_error_becomes_error_event(fake_client):
    def failing_stream(*_args):
        yield from ()
        raise GenerationError("connection reset")

    fake_client.generate_stream.side_effect = failing_stream
    events = list(rewrite_stream("meeting tomorrow", "magic", client=fake_client))
    assert events == [{"type": "error", "message": "connection reset"}]


def test_rewrite_stream_cancel_closes_backend_stream(fake_client):
    closed = []

    def slow_stream(*_args):
        try:
            yield StreamChunk("Meeting ")
            yield StreamChunk("tomorrow")
        finally:
            closed.append(True)

    fake_client.generate_stream.side_effect = slow_stream
    events = rewrite_stream("meeting tomorrow", "magic", client=fake_client)
    assert next(events) == {"type": "chunk", "chunk": "Meeting "}
    events.close()
    assert closed == [True]
    fake_client.generate.assert_not_called()


def test_rewrite_stream_extraction_preset_single_chunk(fake_client):
    fake_client.generate.return_value = json.dumps(
        {"insight": "You keep planning because starting risks imperfection.", "action": "Open the doc and write one sentence."}
    )
    events = list(rewrite_stream("I can't start my thesis", "unstuck", client=fake_client))
    assert [e["type"] for e in events] == ["chunk", "done"]
    assert json.loads(events[0]["chunk"])["action"] == "Open the doc and write one sentence."


def test_extract_outcomes_result(fake_client):
    fake_client.generate.return_value = json.dumps(
        {
            "outcomes": [
                {"type": "message", "text": "Email John about the budget"},
                {"type": "task", "text": "Pick up groceries"},
            ]
        }
    )
    result = extract_outcomes(
        "I need to email John about the budget and also remember to pick up groceries",
        client=fake_client,
    )
    assert [o.type for o in result.outcomes] == [OutcomeType.MESSAGE, OutcomeType.TASK]
    assert result.attempts == 1
    assert result.quality_score == 100
    assert result.status is PipelineState.ACCEPTED


def test_extract_outcomes_min_length(fake_client):
    with pytest.raises(RequestError):
        extract_outcomes("hey", client=fake_client)
    fake_client.generate.assert_not_called()


def test_extract_insight_action_min_length(fake_client):
    with pytest.raises(RequestError):
        extract_insight_action("stuck", client=fake_client)
    fake_client.generate.assert_not_called()


def test_extract_insight_action_result(fake_client):
    fake_client.generate.return_value = json.dumps(
        {"insight": "You keep planning because starting risks imperfection.", "action": "Open the doc and write one sentence."}
    )
    result = extract_insight_action("I can't start my thesis at all", "en", client=fake_client)
    assert result.insight == "You keep planning because starting risks imperfection."
    assert result.action == "Open the doc and write one sentence."
    assert result.status is PipelineState.ACCEPTED


def test_extract_insight_action_terminal_failure_logs_failed_run(fake_client):
    fake_client.generate.return_value = "no json here"
    with patch("rewrite_engine.pipeline.log_run") as mock_log_run:
        with pytest.raises(ExtractionFailed):
            extract_insight_action("I can't start my thesis at all", client=fake_client)
    kwargs = mock_log_run.call_args.kwargs
    assert kwargs["success"] is False
    assert kwargs["status"] == "failed"
    assert kwargs["attempts"] == 3


def test_extract_outcomes_empty_list_is_failure_not_result(fake_client):
    fake_client.generate.return_value = '{"outcomes": []}'
    with pytest.raises(ExtractionFailed):
        extract_outcomes("email John about the budget and buy groceries", client=fake_client)
    assert fake_client.generate.call_count == 3


def test_extract_smart_actions_result(fake_client):
    fake_client.generate.return_value = json.dumps(
        {
            "actions": [
                {
                    "type": "calendar",
                    "title": "Budget meeting with Sarah",
                    "datetime": "2025-01-15T15:00:00+00:00",
                    "attendees": ["Sarah"],
                    "formatted_text": "Budget meeting with Sarah, tomorrow at 3 PM",
                },
                {
                    "type": "email",
                    "title": "Project timeline",
                    "body": "Dear John, could we schedule a call next week? Best regards",
                    "formatted_text": "Dear John, could we schedule a call next week? Best regards",
                },
            ]
        }
    )
    with patch("rewrite_engine.pipeline.log_run") as mock_log_run:
        result = extract_smart_actions(
            "meeting with sarah tomorrow at 3pm and email john about the timeline", client=fake_client
        )
    assert [a.type for a in result.actions] == [SmartActionType.CALENDAR, SmartActionType.EMAIL]
    assert result.actions[0].attendees == ["Sarah"]
    assert result.quality_score == 100
    assert result.status is PipelineState.ACCEPTED
    assert mock_log_run.call_args.kwargs["operation"] == "extract_smart_actions"


def test_extract_smart_actions_empty_text(fake_client):
    with pytest.raises(RequestError):
        extract_smart_actions("   ", client=fake_client)
    fake_client.generate.assert_not_called()


def test_rewrite_smart_actions_preset_returns_json_text(fake_client):
    fake_client.generate.return_value = json.dumps(
        {"actions": [{"type": "todo", "title": "Call mom", "formattedText": "Call mom this week"}]}
    )
    result = rewrite("call mom this week", "smart_actions", client=fake_client)
    assert json.loads(result.text) == {
        "actions": [
            {"type": "todo", "title": "Call mom", "formatted_text": "Call mom this week"}
        ]
    }
