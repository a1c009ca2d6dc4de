# ABOUTME: Public engine operations: rewrite, rewrite_stream, extract_outcomes, extract_insight_action, extract_smart_actions.
# ABOUTME: Request shape is checked before any backend call; every run logs one telemetry line to stdout.

import logging
import time
from contextlib import closing
from typing import Iterator

from core.config import (
    CACHE_ENABLED,
    MAX_CONTEXT_ITEMS,
    MAX_EXTRACTION_ATTEMPTS,
    MAX_INPUT_LENGTH,
    MIN_OUTCOMES_LENGTH,
    MIN_REWRITE_LENGTH,
    MIN_UNSTUCK_LENGTH,
)
from core.database import ResultCache
from core.errors import ExtractionFailed, GenerationError, RequestError
from core.schemas import (
    ExtractionResult,
    InsightActionResult,
    OutcomesResult,
    PipelineState,
    Preset,
    PresetCategory,
    RewriteResult,
    SmartActionsResult,
)
from core.telemetry import log_run
from rewrite_engine.client import GenerationClient, StreamChunk, StreamDone, default_client
from rewrite_engine.composer import AUTO_LANGUAGE, build_messages
from rewrite_engine.correction import validate_and_improve
from rewrite_engine.extraction import extract
from rewrite_engine.presets import (
    OUTCOMES_PRESET_ID,
    SMART_ACTIONS_PRESET_ID,
    UNSTUCK_PRESET_ID,
    parameters,
    resolve,
)
from rewrite_engine.sanitizer import clean

_MIN_LENGTHS = {
    OUTCOMES_PRESET_ID: MIN_OUTCOMES_LENGTH,
    UNSTUCK_PRESET_ID: MIN_UNSTUCK_LENGTH,
}

_cache = ResultCache() if CACHE_ENABLED else None


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _require_text(text: object, min_length: int) -> str:
    """Trimmed request text, or RequestError if missing, too short or too long."""
    if not isinstance(text, str):
        raise RequestError("Text is required and must be a string.")
    trimmed = text.strip()
    if not trimmed:
        raise RequestError("Text is required.")
    if len(trimmed) < min_length:
        raise RequestError(f"Text is too short (minimum {min_length} characters).")
    if len(trimmed) > MAX_INPUT_LENGTH:
        raise RequestError(f"Text is too long (maximum {MAX_INPUT_LENGTH} characters).")
    return trimmed


def _require_preset_id(preset_id: object) -> str:
    if not isinstance(preset_id, str) or not preset_id.strip():
        raise RequestError("Preset id is required and must be a string.")
    return preset_id.strip()


def _normalize_language(language: object) -> str:
    if language is None:
        return AUTO_LANGUAGE
    if not isinstance(language, str):
        raise RequestError("Language must be a string.")
    return language.strip() or AUTO_LANGUAGE


def _normalize_context(context: object) -> list[str]:
    """Non-empty prior items, most recent MAX_CONTEXT_ITEMS kept."""
    if context is None:
        return []
    if not isinstance(context, (list, tuple)) or not all(isinstance(c, str) for c in context):
        raise RequestError("Context must be a list of strings.")
    items = [c.strip() for c in context if c.strip()]
    return items[-MAX_CONTEXT_ITEMS:]


def _prepare(text, preset_id, language, context) -> tuple[str, Preset, str, list[str]]:
    preset = resolve(_require_preset_id(preset_id))
    text = _require_text(text, _MIN_LENGTHS.get(preset.key, MIN_REWRITE_LENGTH))
    return text, preset, _normalize_language(language), _normalize_context(context)


def _active_cache(cache: ResultCache | None, context: list[str]) -> ResultCache | None:
    if context:
        return None
    return cache if cache is not None else _cache


def _run_extraction(
    operation: str,
    text: str,
    preset_id: str,
    language: str,
    client: GenerationClient | None,
) -> ExtractionResult:
    start = time.perf_counter()
    try:
        result = extract(text, preset_id, language, client=client)
    except (ExtractionFailed, GenerationError) as e:
        log_run(
            operation=operation,
            preset_id=preset_id,
            latency_ms=_elapsed_ms(start),
            attempts=getattr(e, "attempts", MAX_EXTRACTION_ATTEMPTS),
            quality_score=None,
            status=PipelineState.FAILED.value,
            success=False,
        )
        raise
    log_run(
        operation=operation,
        preset_id=preset_id,
        latency_ms=_elapsed_ms(start),
        attempts=result.attempts,
        quality_score=result.score,
        status=result.status.value,
        success=True,
    )
    return result


def _extraction_as_rewrite(
    operation: str,
    text: str,
    preset: Preset,
    language: str,
    client: GenerationClient | None,
) -> RewriteResult:
    result = _run_extraction(operation, text, preset.key, language, client)
    return RewriteResult(
        text=result.text,
        was_improved=False,
        quality_score=result.score,
        status=result.status,
    )


def _cached_result(
    cache: ResultCache | None, operation: str, text: str, preset: Preset, language: str
) -> RewriteResult | None:
    """Cache hit, sanitized, with no generation or validation."""
    if cache is None:
        return None
    start = time.perf_counter()
    hit = cache.get(text, preset.key, language)
    if hit is None:
        return None
    output = clean(hit)
    if not output:
        return None
    log_run(
        operation=operation,
        preset_id=preset.key,
        latency_ms=_elapsed_ms(start),
        attempts=0,
        quality_score=100,
        status=PipelineState.ACCEPTED.value,
        success=True,
        cached=True,
    )
    return RewriteResult(
        text=output,
        was_improved=False,
        quality_score=100,
        cached=True,
        status=PipelineState.ACCEPTED,
    )


def _finish(
    raw: str,
    text: str,
    preset: Preset,
    language: str,
    client: GenerationClient,
) -> tuple[RewriteResult, int]:
    """Sanitize, validate and maybe correct a raw completion. Returns the result and correction attempts."""
    output = clean(raw)
    if not output:
        raise GenerationError("Generation produced no usable text after cleanup.")
    improvement = validate_and_improve(output, preset.key, text, language, client=client)
    final = improvement.final_validation
    status = PipelineState.ACCEPTED if final.is_valid else PipelineState.ACCEPTED_DEGRADED
    if status is PipelineState.ACCEPTED_DEGRADED:
        logging.warning(
            "[%s] returning sub-threshold rewrite (score %d): %s",
            preset.key,
            final.score,
            "; ".join(final.issues),
        )
    result = RewriteResult(
        text=improvement.final_output,
        was_improved=improvement.was_improved,
        quality_score=final.score,
        status=status,
    )
    return result, improvement.attempts


def _store(cache: ResultCache | None, text: str, preset: Preset, language: str, result: RewriteResult) -> None:
    if cache is not None and result.status is PipelineState.ACCEPTED:
        cache.set(text, preset.key, language, result.text, result.quality_score)


def rewrite(
    text: str,
    preset_id: str,
    language: str | None = AUTO_LANGUAGE,
    context: list[str] | None = None,
    *,
    client: GenerationClient | None = None,
    cache: ResultCache | None = None,
) -> RewriteResult:
    """Rewrite text with a preset. Raises RequestError before any backend call on a bad request.

    Extraction presets delegate to the extraction pipeline and return its JSON as text.
    """
    text, preset, language, context = _prepare(text, preset_id, language, context)
    if preset.category is PresetCategory.EXTRACTION:
        return _extraction_as_rewrite("rewrite", text, preset, language, client)

    client = client or default_client
    cache = _active_cache(cache, context)
    hit = _cached_result(cache, "rewrite", text, preset, language)
    if hit is not None:
        return hit

    start = time.perf_counter()
    try:
        raw = client.generate(build_messages(preset.key, text, language, context), parameters(preset.key))
        result, corrections = _finish(raw, text, preset, language, client)
    except GenerationError:
        log_run(
            operation="rewrite",
            preset_id=preset.key,
            latency_ms=_elapsed_ms(start),
            attempts=1,
            quality_score=None,
            status=PipelineState.FAILED.value,
            success=False,
        )
        raise
    _store(cache, text, preset, language, result)
    log_run(
        operation="rewrite",
        preset_id=preset.key,
        latency_ms=_elapsed_ms(start),
        attempts=1 + corrections,
        quality_score=result.quality_score,
        status=result.status.value,
        success=True,
        was_improved=result.was_improved,
    )
    return result


def _done_event(result: RewriteResult) -> dict:
    return {
        "type": "done",
        "text": result.text,
        "was_improved": result.was_improved,
        "quality_score": result.quality_score,
        "cached": result.cached,
        "status": result.status.value,
    }


def _error_event(message: str) -> dict:
    return {"type": "error", "message": message}


def _stream_events(
    text: str,
    preset: Preset,
    language: str,
    context: list[str],
    client: GenerationClient | None,
    cache: ResultCache | None,
) -> Iterator[dict]:
    if preset.category is PresetCategory.EXTRACTION:
        try:
            result = _extraction_as_rewrite("rewrite_stream", text, preset, language, client)
        except (ExtractionFailed, GenerationError) as e:
            yield _error_event(str(e))
            return
        yield {"type": "chunk", "chunk": result.text}
        yield _done_event(result)
        return

    client = client or default_client
    cache = _active_cache(cache, context)
    hit = _cached_result(cache, "rewrite_stream", text, preset, language)
    if hit is not None:
        yield {"type": "chunk", "chunk": hit.text}
        yield _done_event(hit)
        return

    start = time.perf_counter()
    messages = build_messages(preset.key, text, language, context)
    try:
        raw = None
        with closing(client.generate_stream(messages, parameters(preset.key))) as stream:
            for event in stream:
                if isinstance(event, StreamChunk):
                    yield {"type": "chunk", "chunk": event.text}
                elif isinstance(event, StreamDone):
                    raw = event.text
        if raw is None:
            raise GenerationError("Generation stream ended without a completion signal.")
        result, corrections = _finish(raw, text, preset, language, client)
    except GeneratorExit:
        logging.info("[%s] stream cancelled by caller", preset.key)
        log_run(
            operation="rewrite_stream",
            preset_id=preset.key,
            latency_ms=_elapsed_ms(start),
            attempts=1,
            quality_score=None,
            status=PipelineState.FAILED.value,
            success=False,
        )
        raise
    except GenerationError as e:
        log_run(
            operation="rewrite_stream",
            preset_id=preset.key,
            latency_ms=_elapsed_ms(start),
            attempts=1,
            quality_score=None,
            status=PipelineState.FAILED.value,
            success=False,
        )
        yield _error_event(str(e))
        return

    _store(cache, text, preset, language, result)
    log_run(
        operation="rewrite_stream",
        preset_id=preset.key,
        latency_ms=_elapsed_ms(start),
        attempts=1 + corrections,
        quality_score=result.quality_score,
        status=result.status.value,
        success=True,
        was_improved=result.was_improved,
    )
    yield _done_event(result)


def rewrite_stream(
    text: str,
    preset_id: str,
    language: str | None = AUTO_LANGUAGE,
    context: list[str] | None = None,
    *,
    client: GenerationClient | None = None,
    cache: ResultCache | None = None,
) -> Iterator[dict]:
    """Check the request now, then return an iterator of chunk events ending in one done or error event.

    Sanitization and validation run only after the last fragment. Closing the iterator early
    closes the backend stream and nothing further is returned.
    """
    text, preset, language, context = _prepare(text, preset_id, language, context)
    return _stream_events(text, preset, language, context, client, cache)


def extract_outcomes(
    text: str,
    language: str | None = AUTO_LANGUAGE,
    *,
    client: GenerationClient | None = None,
) -> OutcomesResult:
    """Turn messy input into 1-10 typed outcomes."""
    text = _require_text(text, MIN_OUTCOMES_LENGTH)
    result = _run_extraction(
        "extract_outcomes", text, OUTCOMES_PRESET_ID, _normalize_language(language), client
    )
    return OutcomesResult(
        outcomes=result.items,
        attempts=result.attempts,
        quality_score=result.score,
        status=result.status,
    )


def extract_insight_action(
    text: str,
    language: str | None = AUTO_LANGUAGE,
    *,
    client: GenerationClient | None = None,
) -> InsightActionResult:
    text = _require_text(text, MIN_UNSTUCK_LENGTH)
    result = _run_extraction(
        "extract_insight_action", text, UNSTUCK_PRESET_ID, _normalize_language(language), client
    )
    return InsightActionResult(
        insight=result.items.insight,
        action=result.items.action,
        attempts=result.attempts,
        quality_score=result.score,
        status=result.status,
    )


def extract_smart_actions(
    text: str,
    language: str | None = AUTO_LANGUAGE,
    *,
    client: GenerationClient | None = None,
) -> SmartActionsResult:
    """Classify input into calendar, email, todo, note and message actions.

    Calendar actions without a datetime and email actions without a body or recipient are dropped.
    """
    text = _require_text(text, MIN_REWRITE_LENGTH)
    result = _run_extraction(
        "extract_smart_actions", text, SMART_ACTIONS_PRESET_ID, _normalize_language(language), client
    )
    return SmartActionsResult(
        actions=result.items,
        attempts=result.attempts,
        quality_score=result.score,
        status=result.status,
    )
