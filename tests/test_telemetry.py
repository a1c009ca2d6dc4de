# ABOUTME: Pytest tests for telemetry JSON lines and cost estimation.
# ABOUTME: Captures stdout with capsys.

import json

from core.telemetry import estimate_cost_usd, log_generation, log_run


def test_estimate_cost_usd():
    assert estimate_cost_usd(1_000_000, 0) == 0.075
    assert estimate_cost_usd(0, 1_000_000) == 0.30


def test_log_generation_prints_one_json_line(capsys):
    log_generation(
        model="gemini-2.5-flash",
        latency_ms=12.3456,
        prompt_tokens=100,
        completion_tokens=50,
        streamed=False,
        success=True,
    )
    line = capsys.readouterr().out.strip()
    data = json.loads(line)
    assert data["event"] == "generation"
    assert data["latency_ms"] == 12.35
    assert data["estimated_cost_usd"] == f"{estimate_cost_usd(100, 50):.6f}"
    assert data["success"] is True


def test_log_run_prints_status_and_flags(capsys):
    log_run(
        operation="rewrite",
        preset_id="magic",
        latency_ms=5.0,
        attempts=2,
        quality_score=85,
        status="accepted",
        success=True,
        was_improved=True,
    )
    data = json.loads(capsys.readouterr().out.strip())
    assert data["event"] == "run"
    assert data["operation"] == "rewrite"
    assert data["attempts"] == 2
    assert data["was_improved"] is True
    assert data["cached"] is False
    assert "timestamp" in data
