# ABOUTME: Shared app configuration and policy constants used across the engine and the API (core package).
# ABOUTME: Every scoring weight, threshold and retry ceiling is read from the environment here, never inlined.

import os

from dotenv import load_dotenv

load_dotenv()


def _parse_int(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(name: str, default: float) -> float:
    raw = os.environ.get(name, str(default))
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Generation backend (Gemini). The SDK reads GEMINI_API_KEY / GOOGLE_API_KEY itself.
MODEL_NAME = os.environ.get("GENERATION_MODEL", "gemini-2.5-flash")
GENERATION_TIMEOUT_SECONDS = _parse_int("GENERATION_TIMEOUT_SECONDS", 60)
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 600

# Quality gate.
QUALITY_THRESHOLD = _parse_int("QUALITY_THRESHOLD", 60)
SHORT_PENALTY = _parse_int("PENALTY_TOO_SHORT", 30)
LONG_PENALTY = _parse_int("PENALTY_TOO_LONG", 10)
FORBIDDEN_PHRASE_PENALTY = _parse_int("PENALTY_FORBIDDEN_PHRASE", 25)
FAILED_CHECK_PENALTY = _parse_int("PENALTY_FAILED_CHECK", 15)
SLOP_PENALTY = _parse_int("PENALTY_SLOP", 20)

# Extra slop regexes appended to the built-in list; separated by newlines or "||".
_raw_slop = os.environ.get("EXTRA_SLOP_PATTERNS", "")
EXTRA_SLOP_PATTERNS = [
    p.strip() for p in _raw_slop.replace("||", "\n").splitlines() if p.strip()
]

# Retry ceilings.
MAX_CORRECTION_ATTEMPTS = max(0, _parse_int("MAX_CORRECTION_ATTEMPTS", 1))
MAX_EXTRACTION_ATTEMPTS = max(1, _parse_int("MAX_EXTRACTION_ATTEMPTS", 3))
# Must stay positive so each retry samples strictly hotter than the last.
_temperature_step = _parse_float("EXTRACTION_TEMPERATURE_STEP", 0.1)
EXTRACTION_TEMPERATURE_STEP = _temperature_step if _temperature_step > 0 else 0.1
CORRECTION_TEMPERATURE = 0.5
CORRECTION_MAX_OUTPUT_TOKENS = 1000

# Request shape.
MAX_INPUT_LENGTH = _parse_int("MAX_INPUT_LENGTH", 8000)
MIN_REWRITE_LENGTH = 1
MIN_OUTCOMES_LENGTH = 5
MIN_UNSTUCK_LENGTH = 10
MAX_CONTEXT_ITEMS = 10

# Result cache.
CACHE_ENABLED = _parse_bool("REWRITE_CACHE_ENABLED", True)
CACHE_DB_PATH = os.environ.get("REWRITE_CACHE_DB_PATH", "rewrite_cache.db")

# CORS: comma-separated origins. The mobile overlay calls from arbitrary origins by default.
_raw_cors = os.environ.get("CORS_ORIGINS", "*")
CORS_ORIGINS = [o.strip() for o in _raw_cors.split(",") if o.strip()] or ["*"]
