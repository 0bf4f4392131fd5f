"""Hint ledger: which paid hints a learner has revealed for one question."""
import logging
from enum import Enum

from french_tutor.models import HintSpec, HintTier

logger = logging.getLogger(__name__)

TIER_COSTS = {
    HintTier.GENTLE: 1,
    HintTier.MEDIUM: 2,
    HintTier.STRONG: 3,
}


class RevealOutcome(str, Enum):
    OK = "ok"
    ALREADY_REVEALED = "already_revealed"
    UNKNOWN_ID = "unknown_id"
    REJECTED = "rejected"


class HintLedger:
    """Tracks revealed hints. Reveals are idempotent and cannot be undone."""

    def __init__(self, hints):
        self._hints: tuple[HintSpec, ...] = tuple(hints)
        self._by_id = {h.id: h for h in self._hints}
        self._revealed: set[str] = set()

    def reveal(self, hint_id: str) -> RevealOutcome:
        if hint_id not in self._by_id:
            logger.debug("Ignoring unknown hint id %r", hint_id)
            return RevealOutcome.UNKNOWN_ID
        if hint_id in self._revealed:
            return RevealOutcome.ALREADY_REVEALED
        self._revealed.add(hint_id)
        return RevealOutcome.OK

    def is_revealed(self, hint_id: str) -> bool:
        return hint_id in self._revealed

    def available_hints(self) -> list[HintSpec]:
        return [h for h in self._hints if h.id not in self._revealed]

    def revealed_hints(self) -> list[HintSpec]:
        return [h for h in self._hints if h.id in self._revealed]

    @property
    def revealed_ids(self) -> frozenset:
        return frozenset(self._revealed)

    @property
    def count(self) -> int:
        return len(self._revealed)

    def total_cost(self) -> int:
        return sum(self._by_id[hint_id].cost for hint_id in self._revealed)
