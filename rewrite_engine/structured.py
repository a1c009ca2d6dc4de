# ABOUTME: Parsing and normalization for the JSON output contracts: outcome lists, smart actions and insight/action pairs.
# ABOUTME: Raises ParseFailure when output is not the expected shape or holds no usable item; normalization strips bullets.

import json
import logging
import re

from pydantic import ValidationError

from core.errors import ParseFailure
from core.schemas import InsightAction, Outcome, OutcomeType, SmartAction, SmartActionType

MAX_OUTCOMES = 10
VALID_OUTCOME_TYPES = frozenset(t.value for t in OutcomeType)

_CLOSERS = {"{": "}", "[": "]"}
_LEADING_BULLET_RE = re.compile(r"^[-•*]\s*")
_LEADING_NUMBER_RE = re.compile(r"^\d+[.)]\s*")
_SURROUNDING_QUOTES_RE = re.compile(r"^[\"']|[\"']$")
_SURROUNDING_BOLD_RE = re.compile(r"^\*\*|\*\*$")
_WHITESPACE_RE = re.compile(r"\s+")


def load_json(text: str):
    """Parse text as JSON, falling back to the span from the first bracket to its last closer (e.g. inside code fences)."""
    if not isinstance(text, str) or not text.strip():
        raise ParseFailure("Output is empty", raw=text or "")
    try:
        return json.loads(text)
    except ValueError:
        pass
    starts = sorted(i for i in (text.find("{"), text.find("[")) if i != -1)
    for start in starts:
        end = text.rfind(_CLOSERS[text[start]])
        if end <= start:
            continue
        try:
            return json.loads(text[start : end + 1])
        except ValueError:
            continue
    raise ParseFailure("Output is not valid JSON", raw=text)


def normalize_item_text(text: str) -> str:
    """Strip a leading bullet or number marker and collapse whitespace."""
    cleaned = text.strip()
    cleaned = _LEADING_BULLET_RE.sub("", cleaned)
    cleaned = _LEADING_NUMBER_RE.sub("", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def normalize_pair_text(text: str) -> str:
    """Strip surrounding quotes and markdown bold, then normalize like an item."""
    cleaned = text.strip()
    cleaned = _SURROUNDING_QUOTES_RE.sub("", cleaned)
    cleaned = _SURROUNDING_BOLD_RE.sub("", cleaned)
    return normalize_item_text(cleaned)


def _raw_items(text: str, key: str) -> list:
    data = load_json(text)
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        raise ParseFailure(f"Output has no {key} array", raw=text)
    return data


def raw_outcome_items(text: str) -> list:
    """Return the raw outcome list from output text, or raise ParseFailure."""
    return _raw_items(text, "outcomes")


def raw_action_items(text: str) -> list:
    return _raw_items(text, "actions")


def _normalized(items: list, field: str) -> list:
    """Copy of items with field normalized; malformed items are kept as they are."""
    normalized = []
    for item in items:
        if isinstance(item, dict) and isinstance(item.get(field), str):
            item = {**item, field: normalize_item_text(item[field])}
        normalized.append(item)
    return normalized


def is_valid_outcome_item(item) -> bool:
    return (
        isinstance(item, dict)
        and item.get("type") in VALID_OUTCOME_TYPES
        and isinstance(item.get("text"), str)
        and bool(item["text"].strip())
    )


def parse_outcomes(text: str) -> list[Outcome]:
    """Parse, drop malformed items, normalize text and cap the list at MAX_OUTCOMES.

    Output without a single usable outcome is a ParseFailure, never an empty list.
    """
    outcomes = []
    for item in _normalized(raw_outcome_items(text), "text"):
        if not is_valid_outcome_item(item):
            continue
        outcomes.append(Outcome(type=OutcomeType(item["type"]), text=item["text"]))
    if not outcomes:
        raise ParseFailure("Output has no valid outcomes", raw=text)
    return outcomes[:MAX_OUTCOMES]


def outcomes_for_scoring(text: str) -> str:
    """Every raw outcome item, normalized but not filtered or capped, as JSON for the validator."""
    items = _normalized(raw_outcome_items(text), "text")
    return json.dumps({"outcomes": items}, ensure_ascii=False)


def smart_action_problem(item) -> str | None:
    """Why a raw action item is unusable, or None when it is usable."""
    if not isinstance(item, dict):
        return "not an object"
    try:
        action = SmartAction.model_validate(item)
    except ValidationError as e:
        return f"{e.error_count()} field error(s)"
    if action.type is SmartActionType.CALENDAR and not action.datetime:
        return "calendar action without datetime"
    if action.type is SmartActionType.EMAIL and not (action.body or action.recipient):
        return "email action without body or recipient"
    return None


def parse_smart_actions(text: str) -> list[SmartAction]:
    """Parse actions, skipping items that miss required fields or fail their type's rule."""
    actions = []
    for item in _normalized(raw_action_items(text), "title"):
        problem = smart_action_problem(item)
        if problem is not None:
            logging.warning("Skipping smart action (%s): %r", problem, item)
            continue
        actions.append(SmartAction.model_validate(item))
    if not actions:
        raise ParseFailure("Output has no valid actions", raw=text)
    return actions


def smart_actions_for_scoring(text: str) -> str:
    items = _normalized(raw_action_items(text), "title")
    return json.dumps({"actions": items}, ensure_ascii=False)


def parse_insight_action(text: str) -> InsightAction:
    """Parse and normalize the insight/action pair; both fields must be non-empty strings."""
    data = load_json(text)
    if not isinstance(data, dict):
        raise ParseFailure("Output is not a JSON object", raw=text)
    insight = data.get("insight")
    action = data.get("action")
    if not isinstance(insight, str) or not isinstance(action, str):
        raise ParseFailure("Output is missing insight or action", raw=text)
    try:
        return InsightAction(
            insight=normalize_pair_text(insight), action=normalize_pair_text(action)
        )
    except ValidationError as e:
        raise ParseFailure(f"Insight or action is empty: {e.error_count()} error(s)", raw=text) from e


def dump_outcomes(outcomes: list[Outcome]) -> str:
    return json.dumps(
        {"outcomes": [o.model_dump(mode="json") for o in outcomes]}, ensure_ascii=False
    )


def dump_smart_actions(actions: list[SmartAction]) -> str:
    return json.dumps(
        {"actions": [a.model_dump(mode="json", exclude_none=True) for a in actions]},
        ensure_ascii=False,
    )


def dump_insight_action(pair: InsightAction) -> str:
    return json.dumps(pair.model_dump(mode="json"), ensure_ascii=False)
