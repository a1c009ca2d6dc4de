# ABOUTME: Self-correction for the free-text path: validate, and if below threshold ask an editor pass to fix the issues.
# ABOUTME: A corrected candidate replaces the current output only when its score is strictly higher.

import logging

from core.config import (
    CORRECTION_MAX_OUTPUT_TOKENS,
    CORRECTION_TEMPERATURE,
    MAX_CORRECTION_ATTEMPTS,
)
from core.errors import GenerationError
from core.schemas import GenerationParams, ImprovementResult, Message
from rewrite_engine.client import GenerationClient, default_client
from rewrite_engine.composer import AUTO_LANGUAGE, language_name
from rewrite_engine.presets import resolve
from rewrite_engine.sanitizer import clean
from rewrite_engine.validator import DEFAULT_POLICY, ScoringPolicy, validate

CORRECTION_INSTRUCTION = """You are a quality control editor.

You are given a generated text with concrete quality issues. Fix it.

RULES:
1. Keep the same intent and meaning as the original user input.
2. Fix only the issues listed.
3. Output only the corrected text, with no explanation.
4. Never start with "Here is", "Sure" or "Certainly".
5. Never end with "Let me know if you need anything".
6. Never use: delve, tapestry, leverage, synergy, evergreen.
7. Sound like a person wrote it."""

CORRECTION_PARAMS = GenerationParams(
    temperature=CORRECTION_TEMPERATURE,
    max_output_tokens=CORRECTION_MAX_OUTPUT_TOKENS,
)


def correction_messages(
    output: str,
    original_input: str,
    issues: list[str],
    language: str | None = AUTO_LANGUAGE,
) -> list[Message]:
    """Editor instruction plus the original input, the flawed output and its issue list."""
    instruction = CORRECTION_INSTRUCTION
    name = language_name(language)
    if name:
        instruction += f"\n\nWrite the corrected output ENTIRELY in {name}. Every word must be in {name}."
    issue_list = "\n".join(f"- {issue}" for issue in issues)
    body = (
        f"ORIGINAL USER INPUT:\n{original_input}\n\n"
        f"OUTPUT WITH ISSUES:\n{output}\n\n"
        f"ISSUES TO FIX:\n{issue_list}\n\n"
        "Provide the corrected output only:"
    )
    return [Message(role="system", content=instruction), Message(role="user", content=body)]


def validate_and_improve(
    output: str,
    preset_id: str,
    original_input: str,
    language: str | None = AUTO_LANGUAGE,
    *,
    client: GenerationClient | None = None,
    policy: ScoringPolicy = DEFAULT_POLICY,
    max_attempts: int = MAX_CORRECTION_ATTEMPTS,
) -> ImprovementResult:
    """Validate output; run up to max_attempts correction passes while it stays below threshold.

    The returned score is never lower than the original's. A backend failure during correction
    ends the loop and keeps the best output seen so far.
    """
    client = client or default_client
    preset = resolve(preset_id)
    original_validation = validate(output, preset.quality, original_input, policy)
    best_output, best_validation = output, original_validation
    attempts = 0

    while not best_validation.is_valid and attempts < max_attempts:
        attempts += 1
        messages = correction_messages(
            best_output, original_input, best_validation.issues, language
        )
        try:
            candidate = clean(client.generate(messages, CORRECTION_PARAMS))
        except GenerationError as e:
            logging.warning("Correction attempt %d for %s failed: %s", attempts, preset.key, e)
            break
        if not candidate:
            logging.info("Correction attempt %d for %s came back empty", attempts, preset.key)
            continue
        candidate_validation = validate(candidate, preset.quality, original_input, policy)
        if candidate_validation.score > best_validation.score:
            best_output, best_validation = candidate, candidate_validation
        else:
            logging.info(
                "Correction attempt %d for %s did not improve (%d <= %d)",
                attempts,
                preset.key,
                candidate_validation.score,
                best_validation.score,
            )

    return ImprovementResult(
        final_output=best_output,
        was_improved=best_validation.score > original_validation.score,
        final_validation=best_validation,
        original_validation=original_validation,
        attempts=attempts,
    )
