# ABOUTME: Non-generative output cleanup: strips stock assistant openers and closers with case-insensitive regexes.
# ABOUTME: clean() is pure and idempotent; prefixes are stripped before suffixes and interior text is never touched.

import re

PREFIX_PATTERNS = [
    re.compile(r"^sure\b[,!.]\s*", re.IGNORECASE),
    re.compile(r"^certainly\b[,!.]\s*", re.IGNORECASE),
    re.compile(r"^of course\b[,!.]\s*", re.IGNORECASE),
    re.compile(r"^absolutely\b[,!.]\s*", re.IGNORECASE),
    re.compile(r"^here is\b[^:\n]*:\s*", re.IGNORECASE),
    re.compile(r"^here's\b[^:\n]*:\s*", re.IGNORECASE),
    re.compile(r"^i've created\b[^:\n]*:\s*", re.IGNORECASE),
]

SUFFIX_PATTERNS = [
    re.compile(r"\s*let me know if you (need|want|would like)[^.\n]*\.?\s*$", re.IGNORECASE),
    re.compile(r"\s*feel free to[^.\n]*\.?\s*$", re.IGNORECASE),
    re.compile(r"\s*hope this helps[^.\n]*\.?\s*$", re.IGNORECASE),
    re.compile(r"\s*i hope this[^.\n]*\.?\s*$", re.IGNORECASE),
]


def _strip_all(text: str, patterns: list[re.Pattern]) -> str:
    changed = True
    while changed:
        changed = False
        for pattern in patterns:
            stripped = pattern.sub("", text, count=1).strip()
            if stripped != text:
                text = stripped
                changed = True
    return text


def clean(text: str) -> str:
    """Strip known filler openers and closers; runs to a fixed point so clean(clean(x)) == clean(x)."""
    if not isinstance(text, str):
        return ""
    current = text.strip()
    while True:
        cleaned = _strip_all(_strip_all(current, PREFIX_PATTERNS), SUFFIX_PATTERNS)
        if cleaned == current:
            return cleaned
        current = cleaned
