import pytest

from french_tutor.models import HintSpec, HintTier, Question, Variant


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualScheduler:
    """Scheduler that records callbacks and runs them on demand."""

    def __init__(self):
        self.scheduled = []
        self.cancelled = []

    def schedule(self, delay_s, callback):
        handle = (delay_s, callback)
        self.scheduled.append(handle)
        return handle

    def cancel(self, handle):
        self.cancelled.append(handle)

    def fire_all(self):
        for _, callback in list(self.scheduled):
            callback()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


HINTS = (
    HintSpec("h1", "Think about the grammar.", 1, HintTier.GENTLE),
    HintSpec("h2", "It is masculine.", 2, HintTier.MEDIUM),
    HintSpec("h3", "The answer starts with 'l'.", 3, HintTier.STRONG),
)


def make_question(variant=Variant.MULTIPLE_CHOICE, correct_answer="Paris,paris", **kwargs):
    defaults = {
        "id": f"q-{variant.value}",
        "variant": variant,
        "prompt": "Quelle est la capitale de la France ?",
        "correct_answer": correct_answer,
        "hints": HINTS,
    }
    defaults.update(kwargs)
    return Question(**defaults)


@pytest.fixture
def mc_question():
    return make_question(explanation="Paris est la capitale.")


@pytest.fixture
def blank_question():
    return make_question(
        Variant.FILL_BLANK,
        "le,la|chat,chien",
        prompt="[BLANK] petit [BLANK] dort.",
    )


@pytest.fixture
def timed_question():
    return make_question(time_limit_seconds=30)
