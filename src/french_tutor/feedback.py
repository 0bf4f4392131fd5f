"""Feedback messages for scored submissions."""
import random
from typing import Optional

from french_tutor.models import Feedback, Question, SessionStatus, SubmissionResult, Variant

ENCOURAGEMENTS = {
    "correct": ["Excellent!", "Great job!", "Perfect!", "Well done!", "Bravo!"],
    "partial": ["Good start!", "Getting closer!", "Nice try!", "On the right track!"],
    "incorrect": ["Keep trying!", "Almost there!", "Good effort!", "Try again!", "You can do it!"],
}

GOOD_ATTEMPT_RATIO = 0.5
MAX_HINT_SUGGESTIONS = 2


def select_tier(result: SubmissionResult, variant: Optional[Variant] = None) -> str:
    """``partial`` means some credit was earned.

    A text answer that scored nothing still counts as partial when part of
    it overlapped the expected words.
    """
    if result.is_correct:
        return "correct"
    if result.score > 0:
        return "partial"
    if variant is Variant.TEXT_INPUT and 0 < result.raw_match_ratio < 1:
        return "partial"
    return "incorrect"


def _first(raw, sep: str) -> str:
    if isinstance(raw, (list, tuple)):
        return str(raw[0]).strip() if raw else ""
    return str(raw).split(sep)[0].strip()


def describe_answer(question: Question) -> Optional[str]:
    """Human-readable form of the preferred correct answer.

    Returns None when the answer encoding does not fit the variant.
    """
    raw = question.correct_answer
    variant = question.variant
    if variant is Variant.DRAG_DROP:
        if not isinstance(raw, dict):
            return None
        return ", ".join(f"{target} → {_first(items, ',')}" for target, items in raw.items())
    if not isinstance(raw, (str, list, tuple)):
        return None
    if variant is Variant.FILL_BLANK:
        groups = raw.split("|") if isinstance(raw, str) else list(raw)
        return " / ".join(_first(group, ",") for group in groups)
    if variant is Variant.IMAGE_BASED:
        regions = raw.split(",") if isinstance(raw, str) else list(raw)
        return ", ".join(str(r).strip() for r in regions)
    if variant is Variant.TEXT_INPUT:
        return _first(raw, "|")
    return _first(raw, ",")


def _text_suggestions(result: SubmissionResult) -> list[str]:
    suggestions = []
    if not result.is_correct and result.raw_match_ratio >= GOOD_ATTEMPT_RATIO:
        suggestions.append("Good attempt, but needs improvement.")
    if result.missing_words:
        suggestions.append(f"Missing words: {', '.join(result.missing_words)}")
    if result.extra_words:
        suggestions.append(f"Extra words that might not be needed: {', '.join(result.extra_words)}")
    return suggestions


def compose(
    result: SubmissionResult,
    question: Question,
    exhausted: bool = False,
    eager_disclosure: bool = False,
    revealed_hint_ids=(),
    rng: Optional[random.Random] = None,
) -> Feedback:
    rng = rng or random
    tier = select_tier(result, question.variant)
    disclosure = None
    if not result.is_correct and (exhausted or eager_disclosure):
        disclosure = describe_answer(question)

    # cheapest unseen hints; reveal text stays hidden until paid for
    hint_suggestions = []
    if not result.is_correct and not exhausted:
        unseen = [h for h in question.hints if h.id not in revealed_hint_ids]
        hint_suggestions = sorted(unseen, key=lambda h: h.cost)[:MAX_HINT_SUGGESTIONS]

    suggestions = []
    if question.variant is Variant.TEXT_INPUT and not result.is_correct:
        suggestions = _text_suggestions(result)

    return Feedback(
        tier=tier,
        encouragement=rng.choice(ENCOURAGEMENTS[tier]),
        score_display=f"{result.score}/{question.point_value}",
        explanation=question.explanation,
        correct_answer_disclosure=disclosure,
        hint_suggestions=hint_suggestions,
        suggestions=suggestions,
    )


def compose_for_session(session, eager_disclosure: bool = False, rng=None) -> Optional[Feedback]:
    if session.last_result is None:
        return None
    return compose(
        session.last_result,
        session.question,
        exhausted=session.status is SessionStatus.EXHAUSTED,
        eager_disclosure=eager_disclosure,
        revealed_hint_ids=session.hints.revealed_ids,
        rng=rng,
    )
