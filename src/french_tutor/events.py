"""Hand-off of submission results to the gamification and persistence collaborators."""
import logging
from dataclasses import dataclass, field
from typing import Optional

from french_tutor.db import record_activity, record_submission
from french_tutor.models import Question, SubmissionResult, Variant

logger = logging.getLogger(__name__)

# variant -> (activity type, base points)
ACTIVITY_TABLE = {
    Variant.MULTIPLE_CHOICE: ("multiple_choice_question", 2),
    Variant.FILL_BLANK: ("grammar_exercise", 3),
    Variant.DRAG_DROP: ("vocabulary_matching", 3),
    Variant.TEXT_INPUT: ("translation_exercise", 4),
    Variant.IMAGE_BASED: ("visual_identification", 2),
}

_unmapped = set(Variant) - set(ACTIVITY_TABLE)
if _unmapped:
    raise RuntimeError(f"No activity mapping for {sorted(v.value for v in _unmapped)}")


@dataclass(frozen=True)
class ActivityEvent:
    activity_type: str
    base_points: int
    metadata: dict = field(default_factory=dict)


def build_activity_event(question: Question, result: SubmissionResult) -> Optional[ActivityEvent]:
    """Activity completion event for a scoring submission, None when it scored nothing."""
    if result.score <= 0:
        return None
    activity_type, base_points = ACTIVITY_TABLE[question.variant]
    return ActivityEvent(
        activity_type=activity_type,
        base_points=base_points,
        metadata={
            "question_id": question.id,
            "variant": question.variant.value,
            "is_correct": result.is_correct,
            "score": result.score,
            "elapsed_ms": result.elapsed_ms,
            "attempts_used": result.attempts_used,
            "hints_used": result.hints_used,
            "is_first_attempt": result.is_first_attempt,
        },
    )


class SqliteResultSink:
    """Persistence and activity collaborator backed by the local store."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def save_result(self, question: Question, result: SubmissionResult) -> None:
        record_submission(self.db_path, result, question.variant.value)

    def complete_activity(self, event: ActivityEvent) -> None:
        record_activity(self.db_path, event)


class ResultDispatcher:
    """Fire-and-forget delivery of results. Collaborator errors are logged, not raised."""

    def __init__(self, gamification=None, persistence=None) -> None:
        self.gamification = gamification
        self.persistence = persistence

    def dispatch(self, question: Question, result: SubmissionResult) -> Optional[ActivityEvent]:
        if self.persistence is not None:
            try:
                self.persistence.save_result(question, result)
            except Exception:
                logger.exception("Persisting result for %s failed", question.id)

        event = build_activity_event(question, result)
        if event is not None and self.gamification is not None:
            try:
                self.gamification.complete_activity(event)
            except Exception:
                logger.exception("Activity completion for %s failed", question.id)
        return event
