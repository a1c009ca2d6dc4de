# ABOUTME: Pydantic models for the rewrite engine: presets, messages, validation results and extraction entities.
# ABOUTME: Used by rewrite_engine modules and by FastAPI response bodies.

from enum import Enum
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PresetCategory(str, Enum):
    """Amplifier category: selects which mode block is appended to the instruction text."""

    SOCIAL = "social"
    EMAIL = "email"
    CREATIVE = "creative"
    EXTRACTION = "extraction"
    NONE = "none"


class QualityCategory(str, Enum):
    """Rule-set key used by the quality validator."""

    EMAIL = "email"
    SOCIAL = "social"
    REPLY = "reply"
    CREATIVE = "creative"
    UTILITY = "utility"
    STRUCTURED = "structured"
    OUTCOMES = "outcomes"
    UNSTUCK = "unstuck"
    SMART_ACTIONS = "smart_actions"
    DEFAULT = "default"


class PipelineState(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    VALIDATING = "validating"
    CORRECTING = "correcting"
    REGENERATING = "regenerating"
    ACCEPTED = "accepted"
    ACCEPTED_DEGRADED = "accepted_degraded"
    FAILED = "failed"


class Message(BaseModel):
    """One role-tagged turn in the sequence sent to the generation backend."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class PresetExample(BaseModel):
    """Few-shot pair. Output is plain text, or a structured object for extraction presets."""

    model_config = ConfigDict(frozen=True)

    input: str
    output: str | dict


class Preset(BaseModel):
    """Static preset definition. Immutable once the registry is loaded."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    category: PresetCategory
    quality: QualityCategory
    behavior: str
    examples: tuple[PresetExample, ...] = ()
    temperature: float | None = None
    max_output_tokens: int | None = None


class GenerationParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(ge=0.0, le=2.0)
    max_output_tokens: int = Field(gt=0)


class ValidationResult(BaseModel):
    """Score and issues for one candidate output. A value, never raised."""

    score: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    is_valid: bool
    category: QualityCategory
    parse_failed: bool = False


class OutcomeType(str, Enum):
    MESSAGE = "message"
    TASK = "task"
    IDEA = "idea"
    CONTENT = "content"
    NOTE = "note"


class Outcome(BaseModel):
    """One atomic, typed, actionable item extracted from messy input."""

    type: OutcomeType
    text: str = Field(min_length=1)


class InsightAction(BaseModel):
    """Diagnostic one-liner paired with one small, concrete next step."""

    insight: str = Field(min_length=1)
    action: str = Field(min_length=1)


class SmartActionType(str, Enum):
    CALENDAR = "calendar"
    EMAIL = "email"
    TODO = "todo"
    NOTE = "note"
    MESSAGE = "message"


class SmartAction(BaseModel):
    """One classified action ready for a calendar, mail, task or notes app.

    Calendar actions need a datetime; email actions need a body or a recipient.
    """

    type: SmartActionType
    title: str = Field(min_length=1)
    formatted_text: str = Field(
        min_length=1, validation_alias=AliasChoices("formatted_text", "formattedText")
    )
    description: str | None = None
    datetime: str | None = None
    location: str | None = None
    attendees: list[str] | None = None
    recipient: str | None = None
    subject: str | None = None
    body: str | None = None
    priority: str | None = None
    platform: str | None = None


class ImprovementResult(BaseModel):
    """Outcome of the validate-then-correct step on the free-text path."""

    final_output: str
    was_improved: bool
    final_validation: ValidationResult
    original_validation: ValidationResult
    attempts: int = 0


class RewriteResult(BaseModel):
    text: str
    was_improved: bool
    quality_score: int
    cached: bool = False
    status: PipelineState


class ExtractionResult(BaseModel):
    """Best candidate from the extraction retry loop."""

    items: list[Outcome] | list[SmartAction] | InsightAction
    text: str
    attempts: int
    score: int
    status: PipelineState
    validation: ValidationResult


class OutcomesResult(BaseModel):
    outcomes: list[Outcome]
    attempts: int
    quality_score: int
    status: PipelineState


class InsightActionResult(BaseModel):
    insight: str
    action: str
    attempts: int
    quality_score: int
    status: PipelineState


class SmartActionsResult(BaseModel):
    actions: list[SmartAction]
    attempts: int
    quality_score: int
    status: PipelineState
