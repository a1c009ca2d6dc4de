# ABOUTME: Gemini generation client: whole-result generate() and incremental generate_stream().
# ABOUTME: Every backend failure (API, transport, timeout, empty response) surfaces as GenerationError; telemetry per call.

import time
from dataclasses import dataclass
from typing import Iterator

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from core.config import GENERATION_TIMEOUT_SECONDS, MODEL_NAME
from core.errors import GenerationError
from core.schemas import GenerationParams, Message
from core.telemetry import log_generation

_BACKEND_ERRORS = (genai_errors.APIError, httpx.HTTPError)


@dataclass(frozen=True)
class StreamChunk:
    """One text fragment, in generation order."""

    text: str


@dataclass(frozen=True)
class StreamDone:
    """End-of-stream signal carrying the concatenation of every fragment."""

    text: str


def _usage_counts(usage) -> tuple[int, int]:
    if usage is None:
        return 0, 0
    prompt = getattr(usage, "prompt_token_count", 0) or 0
    completion = getattr(usage, "candidates_token_count", 0) or 0
    return prompt, completion


def to_contents(
    messages: list[Message], params: GenerationParams
) -> tuple[list[types.Content], types.GenerateContentConfig]:
    """Map role-tagged messages onto Gemini contents; system messages become the system instruction."""
    system = "\n\n".join(m.content for m in messages if m.role == "system")
    contents = [
        types.Content(
            role="model" if m.role == "assistant" else "user",
            parts=[types.Part(text=m.content)],
        )
        for m in messages
        if m.role != "system"
    ]
    config = types.GenerateContentConfig(
        system_instruction=system or None,
        temperature=params.temperature,
        max_output_tokens=params.max_output_tokens,
        # Thinking tokens count against max_output_tokens on 2.5 models.
        thinking_config=types.ThinkingConfig(thinking_budget=0),
    )
    return contents, config


class GenerationClient:
    """Thin wrapper over the Gemini SDK. The SDK client is created on first use."""

    def __init__(
        self,
        model: str = MODEL_NAME,
        timeout_seconds: int = GENERATION_TIMEOUT_SECONDS,
        sdk_client: genai.Client | None = None,
    ):
        self.model = model
        self._timeout_ms = timeout_seconds * 1000
        self._sdk_client = sdk_client

    def _sdk(self) -> genai.Client:
        if self._sdk_client is None:
            try:
                self._sdk_client = genai.Client(
                    http_options=types.HttpOptions(timeout=self._timeout_ms)
                )
            except ValueError as e:
                raise GenerationError(f"Generation backend is not configured: {e}") from e
        return self._sdk_client

    def generate(self, messages: list[Message], params: GenerationParams) -> str:
        """Return the complete generated text for messages."""
        contents, config = to_contents(messages, params)
        start = time.perf_counter()
        prompt_tokens = completion_tokens = 0
        success = False
        try:
            response = self._sdk().models.generate_content(
                model=self.model, contents=contents, config=config
            )
            prompt_tokens, completion_tokens = _usage_counts(response.usage_metadata)
            text = response.text
            if not isinstance(text, str) or not text.strip():
                raise GenerationError("Generation backend returned an empty response.")
            success = True
            return text
        except _BACKEND_ERRORS as e:
            raise GenerationError(f"Generation backend call failed: {e}") from e
        finally:
            log_generation(
                model=self.model,
                latency_ms=(time.perf_counter() - start) * 1000,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                streamed=False,
                success=success,
            )

    def generate_stream(
        self, messages: list[Message], params: GenerationParams
    ) -> Iterator[StreamChunk | StreamDone]:
        """Yield StreamChunk fragments in order, then exactly one StreamDone. Errors raise GenerationError.

        Closing the iterator early closes the backend stream, so an aborted caller stops the backend call.
        """
        contents, config = to_contents(messages, params)
        start = time.perf_counter()
        prompt_tokens = completion_tokens = 0
        fragments: list[str] = []
        success = False
        stream = None
        try:
            stream = self._sdk().models.generate_content_stream(
                model=self.model, contents=contents, config=config
            )
            for chunk in stream:
                if chunk.usage_metadata is not None:
                    prompt_tokens, completion_tokens = _usage_counts(chunk.usage_metadata)
                fragment = chunk.text
                if fragment:
                    fragments.append(fragment)
                    yield StreamChunk(fragment)
            full_text = "".join(fragments)
            if not full_text.strip():
                raise GenerationError("Generation backend returned an empty stream.")
            success = True
            yield StreamDone(full_text)
        except _BACKEND_ERRORS as e:
            raise GenerationError(f"Generation backend stream failed: {e}") from e
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
            log_generation(
                model=self.model,
                latency_ms=(time.perf_counter() - start) * 1000,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                streamed=True,
                success=success,
            )


default_client = GenerationClient()
