"""Answer matching for every question variant.

Each matcher compares a learner's candidate answer with the question's
correct-answer encoding and reports one boolean per scoring unit. All
comparisons are case-insensitive and ignore surrounding whitespace.

Correct-answer encodings:
    multiple_choice  "Paris,paris"             comma-separated options
    fill_blank       "le,la|chat,chien"        one comma group per blank
    drag_drop        {"t1": ["a", "b"]}        acceptable items per target
    text_input       "je suis|je suis ici"     pipe-separated full answers
    image_based      ["r1", "r3"] or "r1,r3"   correct region ids

Malformed encodings never raise: the submission fails closed as fully
incorrect and a warning is logged.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any

from french_tutor.models import Question, Variant

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 0.70
BLANK_MARKER = re.compile(r"\[BLANK\]|\{blank\}", re.IGNORECASE)


class MalformedAnswerSpec(ValueError):
    """The correct-answer encoding does not fit the question variant."""


@dataclass(frozen=True)
class MatchOutcome:
    unit_results: tuple
    raw_match_ratio: float
    missing_words: tuple = ()
    extra_words: tuple = ()

    @property
    def is_correct(self) -> bool:
        return bool(self.unit_results) and all(self.unit_results)


def normalize(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def count_blanks(prompt: str) -> int:
    return len(BLANK_MARKER.findall(prompt or ""))


def _options(raw: Any, sep: str) -> list[str]:
    if isinstance(raw, str):
        parts = raw.split(sep)
    elif isinstance(raw, (list, tuple, set, frozenset)):
        parts = list(raw)
    else:
        raise MalformedAnswerSpec(f"expected a string or list, got {type(raw).__name__}")
    options = [normalize(p) for p in parts]
    options = [o for o in options if o]
    if not options:
        raise MalformedAnswerSpec("no acceptable answers")
    return options


def _outcome(units: list[bool]) -> MatchOutcome:
    matched = sum(1 for u in units if u)
    return MatchOutcome(tuple(units), matched / len(units) if units else 0.0)


def _as_list(candidate: Any) -> list:
    if candidate is None:
        return []
    if isinstance(candidate, str):
        return [candidate]
    return list(candidate)


def match_multiple_choice(question: Question, candidate: Any, threshold: float) -> MatchOutcome:
    options = _options(question.correct_answer, ",")
    if not isinstance(candidate, (str, type(None))):
        return _outcome([False])
    return _outcome([normalize(candidate) in options])


def match_fill_blank(question: Question, candidate: Any, threshold: float) -> MatchOutcome:
    raw = question.correct_answer
    if isinstance(raw, str):
        groups = raw.split("|")
    elif isinstance(raw, (list, tuple)):
        groups = list(raw)
    else:
        raise MalformedAnswerSpec(f"expected blank groups, got {type(raw).__name__}")
    synonyms = [_options(group, ",") for group in groups]
    blanks = count_blanks(question.prompt)
    if blanks and blanks != len(synonyms):
        raise MalformedAnswerSpec(
            f"{len(synonyms)} answer groups for {blanks} blanks in the prompt"
        )
    answers = [normalize(a) for a in _as_list(candidate)]
    units = []
    for i, group in enumerate(synonyms):
        units.append(i < len(answers) and answers[i] in group)
    return _outcome(units)


def _target_sets(raw: Any) -> dict:
    if not isinstance(raw, dict) or not raw:
        raise MalformedAnswerSpec("expected a mapping of target id to acceptable items")
    return {normalize(target): set(_options(items, ",")) for target, items in raw.items()}


def match_drag_drop(question: Question, candidate: Any, threshold: float) -> MatchOutcome:
    targets = _target_sets(question.correct_answer)
    drops = {}
    if isinstance(candidate, dict):
        drops = {normalize(t): normalize(item) for t, item in candidate.items() if item is not None}
    units = [drops.get(target) in acceptable for target, acceptable in targets.items()]
    return _outcome(units)


def match_text_input(question: Question, candidate: Any, threshold: float) -> MatchOutcome:
    answers = _options(question.correct_answer, "|")
    text = normalize(candidate) if isinstance(candidate, (str, type(None))) else ""
    if text in answers:
        return MatchOutcome((True,), 1.0)

    expected = answers[0].split()
    given = text.split()
    expected_set = set(expected)
    shared = expected_set & set(given)
    # each shared word counts once, against every word of the answer
    ratio = len(shared) / len(expected)
    missing = tuple(w for w in dict.fromkeys(expected) if w not in shared)
    extra = tuple(w for w in dict.fromkeys(given) if w not in expected_set)
    return MatchOutcome((ratio >= threshold,), ratio, missing, extra)


def match_image_based(question: Question, candidate: Any, threshold: float) -> MatchOutcome:
    correct = list(dict.fromkeys(_options(question.correct_answer, ",")))
    selected = {normalize(c) for c in _as_list(candidate)}
    selected.discard("")
    if question.selection_mode == "single":
        hit = len(selected) == 1 and selected <= set(correct)
        return _outcome([hit])
    # click_regions: selecting anything outside the correct set fails every unit
    if selected - set(correct):
        return _outcome([False] * len(correct))
    return _outcome([region in selected for region in correct])


_MATCHERS = {
    Variant.MULTIPLE_CHOICE: match_multiple_choice,
    Variant.FILL_BLANK: match_fill_blank,
    Variant.DRAG_DROP: match_drag_drop,
    Variant.TEXT_INPUT: match_text_input,
    Variant.IMAGE_BASED: match_image_based,
}

_unhandled = set(Variant) - set(_MATCHERS)
if _unhandled:
    raise RuntimeError(f"No matcher registered for {sorted(v.value for v in _unhandled)}")


def fallback_unit_count(question: Question) -> int:
    if question.variant is Variant.FILL_BLANK:
        return max(1, count_blanks(question.prompt))
    return 1


def match(question: Question, candidate: Any, threshold: float = PASS_THRESHOLD) -> MatchOutcome:
    """Match a candidate answer, failing closed on malformed content."""
    try:
        return _MATCHERS[question.variant](question, candidate, threshold)
    except MalformedAnswerSpec as e:
        logger.warning("Question %s has a malformed answer spec: %s", question.id, e)
        return MatchOutcome((False,) * fallback_unit_count(question), 0.0)
