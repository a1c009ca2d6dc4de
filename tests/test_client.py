# ABOUTME: Pytest tests for the Gemini generation client; the google-genai SDK client is a MagicMock.
# ABOUTME: Verifies message mapping, error wrapping, stream ordering/termination and telemetry per call.

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from core.errors import GenerationError
from core.schemas import GenerationParams, Message
from rewrite_engine.client import GenerationClient, StreamChunk, StreamDone, to_contents

PARAMS = GenerationParams(temperature=0.5, max_output_tokens=300)
MESSAGES = [
    Message(role="system", content="Rewrite things."),
    Message(role="user", content="example in"),
    Message(role="assistant", content="example out"),
    Message(role="user", content="real input"),
]


def _response(text, prompt=10, completion=5):
    usage = SimpleNamespace(prompt_token_count=prompt, candidates_token_count=completion)
    return SimpleNamespace(text=text, usage_metadata=usage)


def test_to_contents_maps_roles_and_system_instruction():
    contents, config = to_contents(MESSAGES, PARAMS)
    assert [c.role for c in contents] == ["user", "model", "user"]
    assert contents[-1].parts[0].text == "real input"
    assert config.system_instruction == "Rewrite things."
    assert config.temperature == 0.5
    assert config.max_output_tokens == 300


def test_generate_returns_text_and_logs_telemetry():
    sdk = MagicMock()
    sdk.models.generate_content.return_value = _response("Done. ")
    client = GenerationClient(model="gemini-test", sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation") as mock_log:
        assert client.generate(MESSAGES, PARAMS) == "Done. "
    kwargs = mock_log.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["prompt_tokens"] == 10
    assert kwargs["completion_tokens"] == 5
    assert kwargs["streamed"] is False
    assert kwargs["success"] is True


def test_generate_empty_response_is_generation_error():
    sdk = MagicMock()
    sdk.models.generate_content.return_value = _response(None)
    client = GenerationClient(sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation") as mock_log:
        with pytest.raises(GenerationError):
            client.generate(MESSAGES, PARAMS)
    assert mock_log.call_args.kwargs["success"] is False


def test_generate_transport_error_is_generation_error():
    sdk = MagicMock()
    sdk.models.generate_content.side_effect = httpx.ConnectTimeout("timed out")
    client = GenerationClient(sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation"):
        with pytest.raises(GenerationError):
            client.generate(MESSAGES, PARAMS)


def test_generate_stream_fragments_then_done():
    sdk = MagicMock()
    sdk.models.generate_content_stream.return_value = iter(
        [_response("Hel", 0, 0), _response(None, 0, 0), _response("lo.", 12, 3)]
    )
    client = GenerationClient(sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation") as mock_log:
        events = list(client.generate_stream(MESSAGES, PARAMS))
    assert events == [StreamChunk("Hel"), StreamChunk("lo."), StreamDone("Hello.")]
    kwargs = mock_log.call_args.kwargs
    assert kwargs["streamed"] is True
    assert kwargs["completion_tokens"] == 3


def test_generate_stream_empty_is_generation_error():
    sdk = MagicMock()
    sdk.models.generate_content_stream.return_value = iter([_response("  ")])
    client = GenerationClient(sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation"):
        with pytest.raises(GenerationError):
            list(client.generate_stream(MESSAGES, PARAMS))


def test_generate_stream_close_closes_backend_stream():
    backend = MagicMock()
    backend.__iter__.return_value = iter([_response("one"), _response("two")])
    sdk = MagicMock()
    sdk.models.generate_content_stream.return_value = backend
    client = GenerationClient(sdk_client=sdk)
    with patch("rewrite_engine.client.log_generation"):
        stream = client.generate_stream(MESSAGES, PARAMS)
        assert next(stream) == StreamChunk("one")
        stream.close()
    backend.close.assert_called_once()


def test_missing_api_key_is_generation_error():
    client = GenerationClient()
    with patch("rewrite_engine.client.genai.Client", side_effect=ValueError("Missing key inputs argument!")):
        with pytest.raises(GenerationError):
            client.generate(MESSAGES, PARAMS)
