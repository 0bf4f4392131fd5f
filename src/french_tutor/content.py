"""Question bank loading and hint generation."""
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from french_tutor.hints import TIER_COSTS
from french_tutor.models import HintSpec, HintTier, Question, Variant

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_BANK = DATA_DIR / "questions.json"

GENERIC_HINT = ("gentle_1", "Read the question carefully and think about what type of answer is expected.")

VARIANT_HINTS = {
    Variant.MULTIPLE_CHOICE: [
        ("mc_eliminate", "Try to eliminate obviously wrong answers first.", HintTier.GENTLE),
        ("mc_context", "Look for context clues in the question that might hint at the correct answer.", HintTier.MEDIUM),
    ],
    Variant.FILL_BLANK: [
        ("fb_grammar", "Think about the grammar rule that applies to this sentence.", HintTier.GENTLE),
        ("fb_word_type", "Consider what type of word (noun, verb, adjective) should go in each blank.", HintTier.MEDIUM),
    ],
    Variant.DRAG_DROP: [
        ("dd_sure_first", "Place the pairs you are sure about first.", HintTier.GENTLE),
        ("dd_gender", "Articles and endings often tell you which words belong together.", HintTier.MEDIUM),
    ],
    Variant.TEXT_INPUT: [
        ("ti_structure", "Remember to use proper French sentence structure.", HintTier.GENTLE),
        ("ti_vocabulary", "Think about the vocabulary words from this lesson.", HintTier.MEDIUM),
    ],
    Variant.IMAGE_BASED: [
        ("img_details", "Look at every part of the picture before choosing.", HintTier.GENTLE),
    ],
}


class ContentError(ValueError):
    """A question bank entry could not be turned into a Question."""


def generate_hints(question: Question) -> tuple:
    """Build the hint list for a question from its variant and explanation."""
    hints = [HintSpec(GENERIC_HINT[0], GENERIC_HINT[1], TIER_COSTS[HintTier.GENTLE], HintTier.GENTLE)]
    for hint_id, text, tier in VARIANT_HINTS.get(question.variant, []):
        hints.append(HintSpec(hint_id, text, TIER_COSTS[tier], tier))
    if question.explanation:
        hints.append(HintSpec("strong_explanation", question.explanation, TIER_COSTS[HintTier.STRONG], HintTier.STRONG))
    return tuple(hints)


def hint_from_dict(data: dict) -> HintSpec:
    tier = HintTier(data.get("tier", "gentle"))
    return HintSpec(
        id=str(data["id"]),
        reveal_text=data["text"],
        cost=int(data.get("cost", TIER_COSTS[tier])),
        tier=tier,
    )


def question_from_dict(data: dict, default_max_attempts: int = 3) -> Question:
    try:
        question = Question(
            id=str(data["id"]),
            variant=Variant(data["variant"]),
            prompt=data["prompt"],
            correct_answer=data["correct_answer"],
            point_value=int(data.get("points", 10)),
            max_attempts=int(data.get("max_attempts", default_max_attempts)),
            hints=tuple(hint_from_dict(h) for h in data.get("hints", [])),
            time_limit_seconds=data.get("time_limit_seconds"),
            explanation=data.get("explanation", ""),
            partial_credit=bool(data.get("partial_credit", True)),
            selection_mode=data.get("selection_mode", "single"),
            options=tuple(data.get("options", [])),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ContentError(f"Invalid question {data.get('id', '?')!r}: {e}") from e
    if not question.hints:
        question = replace(question, hints=generate_hints(question))
    return question


def question_to_dict(question: Question) -> dict:
    return {
        "id": question.id,
        "variant": question.variant.value,
        "prompt": question.prompt,
        "correct_answer": question.correct_answer,
        "points": question.point_value,
        "max_attempts": question.max_attempts,
        "hints": [
            {"id": h.id, "text": h.reveal_text, "cost": h.cost, "tier": h.tier.value}
            for h in question.hints
        ],
        "time_limit_seconds": question.time_limit_seconds,
        "explanation": question.explanation,
        "partial_credit": question.partial_credit,
        "selection_mode": question.selection_mode,
        "options": list(question.options),
    }


def load_questions(path: Optional[str] = None, default_max_attempts: int = 3) -> list[Question]:
    """Load a JSON question bank; the packaged sample bank by default."""
    bank_path = Path(path) if path else DEFAULT_BANK
    try:
        data = json.loads(bank_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ContentError(f"Cannot read question bank {bank_path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise ContentError(f"Question bank {bank_path} has no 'questions' list")
    questions = [question_from_dict(entry, default_max_attempts) for entry in data["questions"]]
    ids = [q.id for q in questions]
    if len(ids) != len(set(ids)):
        raise ContentError(f"Duplicate question ids in {bank_path}")
    logger.info("Loaded %d questions from %s", len(questions), bank_path)
    return questions
