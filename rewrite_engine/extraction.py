# ABOUTME: Extraction pipeline for the JSON-contract presets (outcomes, unstuck, smart_actions): full regeneration per attempt.
# ABOUTME: Temperature rises each attempt; stops at the first valid candidate, else returns the best parseable one.

import logging
from typing import Callable, NamedTuple

from core.config import EXTRACTION_TEMPERATURE_STEP, MAX_EXTRACTION_ATTEMPTS
from core.errors import ExtractionFailed, GenerationError, ParseFailure, RequestError
from core.schemas import (
    ExtractionResult,
    GenerationParams,
    InsightAction,
    Outcome,
    PipelineState,
    Preset,
    PresetCategory,
    QualityCategory,
    SmartAction,
    ValidationResult,
)
from rewrite_engine.client import GenerationClient, default_client
from rewrite_engine.composer import AUTO_LANGUAGE, build_messages
from rewrite_engine.presets import parameters, resolve
from rewrite_engine.sanitizer import clean
from rewrite_engine.structured import (
    dump_insight_action,
    dump_outcomes,
    dump_smart_actions,
    outcomes_for_scoring,
    parse_insight_action,
    parse_outcomes,
    parse_smart_actions,
    smart_actions_for_scoring,
)
from rewrite_engine.validator import DEFAULT_POLICY, ScoringPolicy, validate

_MAX_TEMPERATURE = 2.0

Items = list[Outcome] | list[SmartAction] | InsightAction


class Candidate(NamedTuple):
    items: Items
    canonical: str
    scored: str


def _outcomes(text: str) -> Candidate:
    outcomes = parse_outcomes(text)
    return Candidate(outcomes, dump_outcomes(outcomes), outcomes_for_scoring(text))


def _smart_actions(text: str) -> Candidate:
    actions = parse_smart_actions(text)
    return Candidate(actions, dump_smart_actions(actions), smart_actions_for_scoring(text))


def _insight_action(text: str) -> Candidate:
    pair = parse_insight_action(text)
    canonical = dump_insight_action(pair)
    return Candidate(pair, canonical, canonical)


# The validator scores every raw item (normalized, nothing dropped or capped); callers get the filtered items.
_PARSERS: dict[QualityCategory, Callable[[str], Candidate]] = {
    QualityCategory.OUTCOMES: _outcomes,
    QualityCategory.UNSTUCK: _insight_action,
    QualityCategory.SMART_ACTIONS: _smart_actions,
}


def attempt_temperature(base: float, attempt: int, step: float = EXTRACTION_TEMPERATURE_STEP) -> float:
    """Sampling temperature for a 1-based attempt number."""
    return min(_MAX_TEMPERATURE, round(base + step * (attempt - 1), 4))


def parse_candidate(preset: Preset, raw: str) -> Candidate:
    """Parse raw output as-is; only when that fails, retry once on the filler-stripped text."""
    parse = _PARSERS[preset.quality]
    try:
        return parse(raw)
    except ParseFailure:
        cleaned = clean(raw)
        if cleaned == raw.strip():
            raise
        return parse(cleaned)


def extract(
    text: str,
    preset_id: str,
    language: str | None = AUTO_LANGUAGE,
    *,
    client: GenerationClient | None = None,
    policy: ScoringPolicy = DEFAULT_POLICY,
    max_attempts: int = MAX_EXTRACTION_ATTEMPTS,
) -> ExtractionResult:
    """Run up to max_attempts fresh generations and return the best-scoring parseable candidate.

    Raises ExtractionFailed when no attempt parsed, or GenerationError when every attempt
    failed at the backend.
    """
    client = client or default_client
    preset = resolve(preset_id)
    if preset.category is not PresetCategory.EXTRACTION:
        raise RequestError(f"Preset {preset.key!r} is not an extraction preset.")

    messages = build_messages(preset.key, text, language)
    base = parameters(preset.key)
    best: tuple[Candidate, ValidationResult] | None = None
    backend_failures = 0
    last_backend_error: GenerationError | None = None
    attempt = 0

    while attempt < max_attempts:
        attempt += 1
        params = GenerationParams(
            temperature=attempt_temperature(base.temperature, attempt),
            max_output_tokens=base.max_output_tokens,
        )
        try:
            raw = client.generate(messages, params)
        except GenerationError as e:
            backend_failures += 1
            last_backend_error = e
            logging.warning("[%s] generation failed (attempt %d): %s", preset.key, attempt, e)
            continue

        try:
            candidate = parse_candidate(preset, raw)
        except ParseFailure as e:
            logging.warning(
                "[%s] parse failed (attempt %d): %s: %r", preset.key, attempt, e, raw[:200]
            )
            continue

        validation = validate(candidate.scored, preset.quality, text, policy)
        if best is None or validation.score > best[1].score:
            best = (candidate, validation)
        if validation.is_valid:
            break
        logging.info(
            "[%s] quality check failed (attempt %d, score %d): %s",
            preset.key,
            attempt,
            validation.score,
            "; ".join(validation.issues),
        )

    if best is None:
        if backend_failures == attempt and last_backend_error is not None:
            raise GenerationError(
                f"Generation failed on all {attempt} extraction attempts: {last_backend_error}"
            ) from last_backend_error
        raise ExtractionFailed(
            f"No parseable {preset.key} output after {attempt} attempts.", attempts=attempt
        )

    candidate, validation = best
    if validation.is_valid:
        status = PipelineState.ACCEPTED
    else:
        status = PipelineState.ACCEPTED_DEGRADED
        logging.warning(
            "[%s] returning sub-threshold result (%d attempts, score %d)",
            preset.key,
            attempt,
            validation.score,
        )
    return ExtractionResult(
        items=candidate.items,
        text=candidate.canonical,
        attempts=attempt,
        score=validation.score,
        status=status,
        validation=validation,
    )
