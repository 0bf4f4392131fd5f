"""Data classes for the question engine domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Variant(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    DRAG_DROP = "drag_drop"
    TEXT_INPUT = "text_input"
    IMAGE_BASED = "image_based"


class HintTier(str, Enum):
    GENTLE = "gentle"
    MEDIUM = "medium"
    STRONG = "strong"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ANSWERED = "answered"
    EXHAUSTED = "exhausted"


SELECTION_MODES = ("single", "click_regions")


@dataclass(frozen=True)
class HintSpec:
    id: str
    reveal_text: str
    cost: int
    tier: HintTier = HintTier.GENTLE


@dataclass(frozen=True)
class Question:
    id: str
    variant: Variant
    prompt: str
    correct_answer: Any
    point_value: int = 10
    max_attempts: int = 3
    hints: tuple = ()
    time_limit_seconds: Optional[float] = None
    explanation: str = ""
    partial_credit: bool = True
    selection_mode: str = "single"
    options: tuple = ()

    def __post_init__(self):
        if not isinstance(self.variant, Variant):
            object.__setattr__(self, "variant", Variant(self.variant))
        object.__setattr__(self, "hints", tuple(self.hints))
        object.__setattr__(self, "options", tuple(self.options))
        if self.point_value < 1:
            raise ValueError(f"Question {self.id}: point_value must be positive")
        if self.max_attempts < 1:
            raise ValueError(f"Question {self.id}: max_attempts must be positive")
        if self.time_limit_seconds is not None and self.time_limit_seconds <= 0:
            raise ValueError(f"Question {self.id}: time_limit_seconds must be positive")
        if self.selection_mode not in SELECTION_MODES:
            raise ValueError(f"Question {self.id}: unknown selection_mode {self.selection_mode!r}")
        hint_ids = [h.id for h in self.hints]
        if len(hint_ids) != len(set(hint_ids)):
            raise ValueError(f"Question {self.id}: duplicate hint ids")

    @property
    def is_timed(self) -> bool:
        return self.time_limit_seconds is not None


@dataclass(frozen=True)
class SubmissionResult:
    question_id: str
    is_correct: bool
    unit_results: tuple
    raw_match_ratio: float
    score: int
    elapsed_ms: int
    attempts_used: int
    hints_used: int
    answer: Any = None
    timed_out: bool = False
    missing_words: tuple = ()
    extra_words: tuple = ()

    @property
    def matched_units(self) -> int:
        return sum(1 for unit in self.unit_results if unit)

    @property
    def is_first_attempt(self) -> bool:
        return self.attempts_used == 1


@dataclass(frozen=True)
class ScoringPolicy:
    """Tunable constants shared by the matcher and the scorer."""

    attempt_penalty: int = 2
    bonus_factor: float = 0.2
    pass_threshold: float = 0.70


@dataclass
class Feedback:
    tier: str
    encouragement: str
    score_display: str
    explanation: str = ""
    correct_answer_disclosure: Optional[str] = None
    hint_suggestions: list = field(default_factory=list)
    suggestions: list = field(default_factory=list)
