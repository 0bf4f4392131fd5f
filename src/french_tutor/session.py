"""Question session: the lifecycle state machine for one question.

A session starts ``active``. A fully correct submission moves it to
``answered``; an incorrect one on the final attempt moves it to
``exhausted``. Both are terminal. Every operation is total: calls that are
not valid in the current state leave the session untouched and report the
rejection through their return value.
"""
import logging
import threading
import time
from dataclasses import asdict
from typing import Any, Callable, Optional

from french_tutor.hints import HintLedger, RevealOutcome
from french_tutor.matcher import match
from french_tutor.models import (
    HintSpec, Question, ScoringPolicy, SessionStatus, SubmissionResult,
)
from french_tutor.scoring import DEFAULT_POLICY, score

logger = logging.getLogger(__name__)


class QuestionSession:
    def __init__(
        self,
        question: Question,
        policy: ScoringPolicy = DEFAULT_POLICY,
        auto_advance: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.question = question
        self.policy = policy
        self.auto_advance = auto_advance
        self._clock = clock
        self._lock = threading.RLock()
        self.started_at = clock()
        self.draft_answer: Any = None
        self.attempt_count = 0
        self.status = SessionStatus.ACTIVE
        self.last_result: Optional[SubmissionResult] = None
        self.is_answered = False
        self.hints = HintLedger(question.hints)
        self._timed_out = False

    # Accessors

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.ACTIVE

    @property
    def can_retry(self) -> bool:
        return (
            self.status is SessionStatus.ACTIVE
            and self.last_result is not None
            and not self.last_result.is_correct
            and self.attempt_count < self.question.max_attempts
        )

    @property
    def should_auto_advance(self) -> bool:
        return self.auto_advance and self.status is SessionStatus.ANSWERED

    @property
    def attempts_remaining(self) -> int:
        return self.question.max_attempts - self.attempt_count

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    def elapsed_ms(self) -> int:
        return max(0, int((self._clock() - self.started_at) * 1000))

    def available_hints(self) -> list[HintSpec]:
        return self.hints.available_hints()

    def snapshot(self) -> dict:
        """Plain-data copy of the mutable state, for comparison and storage."""
        return {
            "question_id": self.question.id,
            "status": self.status.value,
            "draft_answer": self.draft_answer,
            "attempt_count": self.attempt_count,
            "started_at": self.started_at,
            "is_answered": self.is_answered,
            "revealed_hint_ids": sorted(self.hints.revealed_ids),
            "timed_out": self._timed_out,
            "last_result": asdict(self.last_result) if self.last_result else None,
        }

    # Transitions

    def set_draft(self, answer: Any) -> bool:
        with self._lock:
            if self.is_terminal:
                return False
            self.draft_answer = answer
            return True

    def submit(self, candidate: Any) -> Optional[SubmissionResult]:
        with self._lock:
            if self.is_terminal:
                logger.debug("Submission to %s ignored: session is %s", self.question.id, self.status.value)
                return self.last_result
            return self._submit(candidate, timed_out=False)

    def _submit(self, candidate: Any, timed_out: bool) -> SubmissionResult:
        q = self.question
        self.attempt_count += 1
        if self.attempt_count > q.max_attempts:
            raise RuntimeError(f"Session for {q.id} exceeded its attempt limit")
        self.draft_answer = candidate
        elapsed = self.elapsed_ms()
        outcome = match(q, candidate, self.policy.pass_threshold)
        points = score(
            outcome.unit_results,
            q.point_value,
            elapsed,
            q.time_limit_seconds,
            self.attempt_count,
            self.hints.total_cost(),
            partial_credit=q.partial_credit,
            policy=self.policy,
        )
        result = SubmissionResult(
            question_id=q.id,
            is_correct=outcome.is_correct,
            unit_results=outcome.unit_results,
            raw_match_ratio=outcome.raw_match_ratio,
            score=points,
            elapsed_ms=elapsed,
            attempts_used=self.attempt_count,
            hints_used=self.hints.count,
            answer=candidate,
            timed_out=timed_out,
            missing_words=outcome.missing_words,
            extra_words=outcome.extra_words,
        )
        self.last_result = result
        self.is_answered = True
        if result.is_correct:
            self.status = SessionStatus.ANSWERED
        elif self.attempt_count >= q.max_attempts:
            self.status = SessionStatus.EXHAUSTED
        logger.info(
            "Question %s attempt %d: correct=%s score=%d status=%s",
            q.id, self.attempt_count, result.is_correct, points, self.status.value,
        )
        return result

    def retry(self) -> bool:
        with self._lock:
            if not self.can_retry:
                logger.debug("Retry on %s ignored", self.question.id)
                return False
            self.draft_answer = None
            self.is_answered = False
            return True

    def reveal_hint(self, hint_id: str) -> RevealOutcome:
        with self._lock:
            if self.is_terminal:
                return RevealOutcome.REJECTED
            return self.hints.reveal(hint_id)

    def timeout(self) -> bool:
        """Force the one timed-out submission. Returns True if it fired."""
        with self._lock:
            if self.is_terminal or self._timed_out or self.attempt_count > 0:
                return False
            self._timed_out = True
            draft = self.draft_answer if self.draft_answer is not None else ""
            logger.info("Question %s timed out", self.question.id)
            self._submit(draft, timed_out=True)
            return True


def create_session(question: Question, **kwargs) -> QuestionSession:
    return QuestionSession(question, **kwargs)
