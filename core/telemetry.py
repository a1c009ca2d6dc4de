# ABOUTME: Engine telemetry: structured JSON log lines for backend calls and pipeline runs, plus cost calculation.
# ABOUTME: Gemini 2.5 Flash pricing: $0.075/1M input, $0.30/1M output.

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone


# Gemini 2.5 Flash pricing per 1M tokens (USD)
INPUT_COST_PER_1M = 0.075
OUTPUT_COST_PER_1M = 0.30


def estimate_cost_usd(prompt_tokens: int, completion_tokens: int) -> float:
    """Estimate cost in USD for Gemini 2.5 Flash."""
    return (prompt_tokens / 1_000_000) * INPUT_COST_PER_1M + (
        completion_tokens / 1_000_000
    ) * OUTPUT_COST_PER_1M


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class GenerationLogEntry:
    """Structured telemetry entry for one backend call."""

    timestamp: str
    model: str
    latency_ms: float
    prompt_tokens: int
    completion_tokens: int
    estimated_cost_usd: float
    streamed: bool
    success: bool

    def to_json(self) -> str:
        data = asdict(self)
        data["latency_ms"] = round(self.latency_ms, 2)
        data["estimated_cost_usd"] = f"{self.estimated_cost_usd:.6f}"
        return json.dumps({"event": "generation", **data})


@dataclass
class RunLogEntry:
    """Structured telemetry entry for one public operation (rewrite, stream, extraction)."""

    timestamp: str
    operation: str
    preset_id: str
    latency_ms: float
    attempts: int
    quality_score: int | None
    was_improved: bool
    cached: bool
    status: str
    success: bool

    def to_json(self) -> str:
        data = asdict(self)
        data["latency_ms"] = round(self.latency_ms, 2)
        return json.dumps({"event": "run", **data})


def log_generation(
    *,
    model: str,
    latency_ms: float,
    prompt_tokens: int,
    completion_tokens: int,
    streamed: bool,
    success: bool,
) -> None:
    """Print a structured JSON log line to stdout for one backend call."""
    entry = GenerationLogEntry(
        timestamp=_now(),
        model=model,
        latency_ms=latency_ms,
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        estimated_cost_usd=estimate_cost_usd(prompt_tokens, completion_tokens),
        streamed=streamed,
        success=success,
    )
    print(entry.to_json(), flush=True)


def log_run(
    *,
    operation: str,
    preset_id: str,
    latency_ms: float,
    attempts: int,
    quality_score: int | None,
    status: str,
    success: bool,
    was_improved: bool = False,
    cached: bool = False,
) -> None:
    """Print a structured JSON log line to stdout for one pipeline run."""
    entry = RunLogEntry(
        timestamp=_now(),
        operation=operation,
        preset_id=preset_id,
        latency_ms=latency_ms,
        attempts=attempts,
        quality_score=quality_score,
        was_improved=was_improved,
        cached=cached,
        status=status,
        success=success,
    )
    print(entry.to_json(), flush=True)
