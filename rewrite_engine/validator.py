# ABOUTME: Quality validator: scores an output against the rule set of its quality category.
# ABOUTME: Point costs, threshold and slop patterns live in an overridable ScoringPolicy built from core.config.

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Iterable

from core.config import (
    EXTRA_SLOP_PATTERNS,
    FAILED_CHECK_PENALTY,
    FORBIDDEN_PHRASE_PENALTY,
    LONG_PENALTY,
    QUALITY_THRESHOLD,
    SHORT_PENALTY,
    SLOP_PENALTY,
)
from core.errors import ParseFailure
from core.schemas import QualityCategory, ValidationResult
from rewrite_engine.structured import (
    MAX_OUTCOMES,
    is_valid_outcome_item,
    parse_insight_action,
    raw_action_items,
    raw_outcome_items,
    smart_action_problem,
)

BUILTIN_SLOP_PATTERNS = [
    r"^(sure|certainly|of course|absolutely)[,!]",
    r"^(here is|here's|i've created|i have created)",
    r"hope this helps",
    r"let me know if you (need|want|would like)",
    r"feel free to",
    r"\bdelve\b",
    r"\bevergreen\b",
    r"\btapestry\b",
    r"in conclusion,",
    r"it's important to note",
    r"at the end of the day",
]

# Item-level costs for the two JSON contracts.
EXTRACTION_PENALTIES = {
    "NO_OUTCOMES": 50,
    "TOO_MANY_OUTCOMES": 15,
    "INVALID_TYPES": 15,
    "OUTCOME_TOO_SHORT": 10,
    "OUTCOME_TOO_LONG": 5,
    "OUTCOME_VAGUE": 5,
    "NO_DIVERSITY": 10,
    "INSIGHT_TOO_SHORT": 20,
    "INSIGHT_TOO_LONG": 10,
    "THERAPY_SPEAK": 15,
    "ACTION_TOO_SHORT": 20,
    "ACTION_TOO_LONG": 15,
    "ACTION_TOO_BIG": 20,
    "ACTION_VAGUE": 15,
    "NO_ACTIONS": 50,
    "DROPPED_ACTIONS": 15,
    "ACTION_TITLE_TOO_LONG": 5,
}


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class ScoringPolicy:
    """Threshold, point costs and slop patterns. Replace fields to tune without touching rules."""

    threshold: int = QUALITY_THRESHOLD
    short_penalty: int = SHORT_PENALTY
    long_penalty: int = LONG_PENALTY
    forbidden_phrase_penalty: int = FORBIDDEN_PHRASE_PENALTY
    failed_check_penalty: int = FAILED_CHECK_PENALTY
    slop_penalty: int = SLOP_PENALTY
    slop_patterns: tuple[re.Pattern, ...] = ()
    extraction_penalties: MappingProxyType = field(
        default_factory=lambda: MappingProxyType(dict(EXTRACTION_PENALTIES))
    )

    def with_slop_patterns(self, patterns: Iterable[str]) -> "ScoringPolicy":
        return replace(self, slop_patterns=self.slop_patterns + compile_patterns(patterns))


DEFAULT_POLICY = ScoringPolicy(
    slop_patterns=compile_patterns(BUILTIN_SLOP_PATTERNS + EXTRA_SLOP_PATTERNS)
)


@dataclass(frozen=True)
class Check:
    """Named boolean predicate over (output, original_input)."""

    name: str
    test: Callable[[str, str], bool]


@dataclass(frozen=True)
class RuleSet:
    min_length: int
    max_length: int
    forbidden: tuple[str, ...] = ()
    checks: tuple[Check, ...] = ()
    structure: Callable[[str, ScoringPolicy], list[tuple[str, int]]] | None = None
    # Off where the output carries the user's own dictated wording.
    slop_check: bool = True


_GREETING_RE = re.compile(r"^(hi|hello|hey|dear|good morning|good afternoon)", re.IGNORECASE)
_SIGNOFF_RE = re.compile(
    r"(best|regards|thanks|cheers|sincerely|thank you)[,.!]?\s*(\[|$)",
    re.IGNORECASE | re.MULTILINE,
)
_TOO_FORMAL_RE = re.compile(r"(pursuant to|aforementioned|hereby|heretofore)", re.IGNORECASE)
_BORING_RE = re.compile(r"(it is important to|we should all|in today's world)", re.IGNORECASE)
_GENERIC_RE = re.compile(r"(embrace the journey|live your best life|be the change)", re.IGNORECASE)
_LIST_LINE_RE = re.compile(r"^[-•*\d]", re.MULTILINE)
_BULLET_RE = re.compile(r"[-•☐*]|^\d+\.", re.MULTILINE)
_HEADING_RE = re.compile(r"##|:$", re.MULTILINE)

_VAGUE_OUTCOME_RES = (
    re.compile(r"^(do|think about|consider|maybe|possibly)\b", re.IGNORECASE),
    re.compile(r"\b(something|stuff|things|etc)\b", re.IGNORECASE),
)
_THERAPY_RES = (
    re.compile(r"it sounds like", re.IGNORECASE),
    re.compile(r"you might be feeling", re.IGNORECASE),
    re.compile(r"it seems that", re.IGNORECASE),
    re.compile(r"perhaps you", re.IGNORECASE),
)
_TOO_BIG_RES = (
    re.compile(r"(create a detailed|make a complete|develop a full|build a comprehensive)", re.IGNORECASE),
    re.compile(r"\b(entire|whole|complete|full plan)\b", re.IGNORECASE),
)
_VAGUE_ACTION_RES = (
    re.compile(r"^(think about|consider|try to|maybe)\b", re.IGNORECASE),
    re.compile(r"\b(somehow|something|stuff)\b", re.IGNORECASE),
)


def _is_transformed(text: str, original: str) -> bool:
    if not original:
        return True
    return text.strip().lower() != original.strip().lower()


def _outcome_structure(text: str, policy: ScoringPolicy) -> list[tuple[str, int]]:
    cost = policy.extraction_penalties
    items = raw_outcome_items(text)
    valid = [i for i in items if is_valid_outcome_item(i)]
    violations = []
    if not valid:
        violations.append(("NO_OUTCOMES: No outcomes extracted", cost["NO_OUTCOMES"]))
    if len(items) > MAX_OUTCOMES:
        violations.append((f"TOO_MANY_OUTCOMES: {len(items)} > {MAX_OUTCOMES}", cost["TOO_MANY_OUTCOMES"]))
    if len(valid) != len(items):
        violations.append(("INVALID_TYPES: Outcome with unknown type or empty text", cost["INVALID_TYPES"]))
    for item in valid:
        item_text = item["text"].strip()
        if len(item_text) < 5:
            violations.append((f'OUTCOME_TOO_SHORT: "{item_text}"', cost["OUTCOME_TOO_SHORT"]))
        if len(item_text) > 200:
            violations.append(("OUTCOME_TOO_LONG: Outcome should be concise", cost["OUTCOME_TOO_LONG"]))
        if any(p.search(item_text) for p in _VAGUE_OUTCOME_RES):
            violations.append((f'OUTCOME_VAGUE: "{item_text}"', cost["OUTCOME_VAGUE"]))
    if len(valid) > 3 and len({i["type"] for i in valid}) == 1:
        violations.append(("NO_DIVERSITY: All outcomes have the same type", cost["NO_DIVERSITY"]))
    return violations


def _smart_actions_structure(text: str, policy: ScoringPolicy) -> list[tuple[str, int]]:
    cost = policy.extraction_penalties
    items = raw_action_items(text)
    usable = [i for i in items if smart_action_problem(i) is None]
    violations = []
    if not usable:
        violations.append(("NO_ACTIONS: No usable actions extracted", cost["NO_ACTIONS"]))
    if len(usable) != len(items):
        dropped = len(items) - len(usable)
        violations.append((f"DROPPED_ACTIONS: {dropped} action(s) missing required fields", cost["DROPPED_ACTIONS"]))
    for item in usable:
        if len(item["title"]) > 100:
            violations.append(("ACTION_TITLE_TOO_LONG: Title should be brief", cost["ACTION_TITLE_TOO_LONG"]))
    return violations


def _unstuck_structure(text: str, policy: ScoringPolicy) -> list[tuple[str, int]]:
    cost = policy.extraction_penalties
    pair = parse_insight_action(text)
    insight, action = pair.insight, pair.action
    violations = []
    if len(insight) < 20:
        violations.append(("INSIGHT_TOO_SHORT: Insight needs more depth", cost["INSIGHT_TOO_SHORT"]))
    if len(insight) > 300:
        violations.append(("INSIGHT_TOO_LONG: Insight should be concise", cost["INSIGHT_TOO_LONG"]))
    if any(p.search(insight) for p in _THERAPY_RES):
        violations.append(("THERAPY_SPEAK: Insight too soft or generic", cost["THERAPY_SPEAK"]))
    if len(action) < 15:
        violations.append(("ACTION_TOO_SHORT: Action needs more detail", cost["ACTION_TOO_SHORT"]))
    if len(action) > 200:
        violations.append(("ACTION_TOO_LONG: Action should be tiny and simple", cost["ACTION_TOO_LONG"]))
    if any(p.search(action) for p in _TOO_BIG_RES):
        violations.append(("ACTION_TOO_BIG: Action not small enough", cost["ACTION_TOO_BIG"]))
    if any(p.search(action) for p in _VAGUE_ACTION_RES):
        violations.append(("ACTION_VAGUE: Action too vague", cost["ACTION_VAGUE"]))
    return violations


_COMMON_FORBIDDEN = ("as an ai", "i cannot")

RULES: dict[QualityCategory, RuleSet] = {
    QualityCategory.EMAIL: RuleSet(
        min_length=50,
        max_length=800,
        forbidden=("here is your", *_COMMON_FORBIDDEN, "i can't"),
        checks=(
            Check("hasGreeting", lambda t, _o: bool(_GREETING_RE.match(t.strip()))),
            Check("hasSignoff", lambda t, _o: bool(_SIGNOFF_RE.search(t))),
            Check("notTooFormal", lambda t, _o: not _TOO_FORMAL_RE.search(t)),
        ),
    ),
    QualityCategory.SOCIAL: RuleSet(
        min_length=20,
        max_length=2000,
        forbidden=(*_COMMON_FORBIDDEN, "i can't", "here is your"),
        checks=(
            Check("hasHook", lambda t, _o: len(t.split("\n")[0]) < 100),
            Check("notBoring", lambda t, _o: not _BORING_RE.search(t)),
            Check("notGeneric", lambda t, _o: not _GENERIC_RE.search(t)),
        ),
    ),
    QualityCategory.REPLY: RuleSet(
        min_length=5,
        max_length=300,
        forbidden=_COMMON_FORBIDDEN,
        checks=(
            Check("isShort", lambda t, _o: len(t.split(" ")) < 50),
            Check("notOverExplain", lambda t, _o: len(t.split(".")) < 5),
        ),
    ),
    QualityCategory.CREATIVE: RuleSet(
        min_length=100,
        max_length=3000,
        forbidden=(*_COMMON_FORBIDDEN, "here is your", "here's a"),
        checks=(
            Check("hasDepth", lambda t, _o: len(t) > 150),
            Check("notList", lambda t, _o: len(_LIST_LINE_RE.findall(t)) < 3),
        ),
    ),
    QualityCategory.UTILITY: RuleSet(
        min_length=10,
        max_length=2000,
        forbidden=(*_COMMON_FORBIDDEN, "here is your"),
        checks=(Check("transformed", _is_transformed),),
    ),
    QualityCategory.STRUCTURED: RuleSet(
        min_length=20,
        max_length=1500,
        forbidden=_COMMON_FORBIDDEN,
        checks=(
            Check(
                "hasStructure",
                lambda t, _o: bool(_BULLET_RE.search(t) or _HEADING_RE.search(t)),
            ),
        ),
    ),
    QualityCategory.OUTCOMES: RuleSet(min_length=0, max_length=5000, structure=_outcome_structure),
    QualityCategory.UNSTUCK: RuleSet(min_length=0, max_length=2000, structure=_unstuck_structure),
    QualityCategory.SMART_ACTIONS: RuleSet(
        min_length=0, max_length=10000, structure=_smart_actions_structure, slop_check=False
    ),
    QualityCategory.DEFAULT: RuleSet(
        min_length=20,
        max_length=3000,
        forbidden=(*_COMMON_FORBIDDEN, "i can't", "here is your rewritten", "here's your"),
    ),
}

_missing = set(QualityCategory) - set(RULES)
if _missing:
    raise RuntimeError(f"Quality rules missing for categories: {sorted(c.value for c in _missing)}")


def validate(
    output: str,
    category: QualityCategory | str,
    original_input: str = "",
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> ValidationResult:
    """Score output against its category's rules. Deterministic; an unknown category raises ValueError."""
    category = QualityCategory(category)
    rules = RULES[category]
    text = output if isinstance(output, str) else ""
    lowered = text.lower()
    issues: list[str] = []
    score = 100
    parse_failed = False

    if len(text) < rules.min_length:
        issues.append(f"Output too short ({len(text)} < {rules.min_length})")
        score -= policy.short_penalty
    if len(text) > rules.max_length:
        issues.append(f"Output too long ({len(text)} > {rules.max_length})")
        score -= policy.long_penalty

    for phrase in rules.forbidden:
        if phrase.lower() in lowered:
            issues.append(f'Contains forbidden phrase: "{phrase}"')
            score -= policy.forbidden_phrase_penalty

    if rules.structure is not None:
        try:
            violations = rules.structure(text, policy)
        except ParseFailure as e:
            parse_failed = True
            issues.append(f"Failed check: parseable ({e})")
            score -= policy.failed_check_penalty
        else:
            for issue, cost in violations:
                issues.append(issue)
                score -= cost

    for check in rules.checks:
        if not check.test(text, original_input or ""):
            issues.append(f"Failed check: {check.name}")
            score -= policy.failed_check_penalty

    for pattern in policy.slop_patterns if rules.slop_check else ():
        if pattern.search(text):
            issues.append(f"AI slop detected: {pattern.pattern}")
            score -= policy.slop_penalty

    score = max(0, score)
    return ValidationResult(
        score=score,
        issues=issues,
        is_valid=score >= policy.threshold and not parse_failed,
        category=category,
        parse_failed=parse_failed,
    )
