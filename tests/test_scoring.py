"""Tests for the submission scorer."""
from french_tutor.models import ScoringPolicy
from french_tutor.scoring import round_half_up, score, time_bonus


def test_full_marks_untimed_first_attempt_no_hints():
    assert score([True], 10, 5000, None, 1, 0) == 10


def test_second_attempt_loses_penalty():
    assert score([True], 10, 5000, None, 2, 0) == 8


def test_correct_answer_earns_at_least_one_point():
    assert score([True], 3, 5000, None, 3, 5) == 1


def test_incorrect_answer_never_negative():
    assert score([False], 10, 5000, None, 3, 6) == 0


def test_partial_credit_rounds_to_nearest():
    assert score([True, True, False], 10, 0, None, 1, 0) == 7
    assert score([True, False], 5, 0, None, 1, 0) == 3


def test_partial_credit_disabled():
    assert score([True, True, False], 10, 0, None, 1, 0, partial_credit=False) == 0


def test_partial_credit_is_not_floored_at_one():
    assert score([True, False, False, False], 10, 0, None, 2, 3) == 0


def test_hint_costs_are_subtracted():
    assert score([True], 10, 0, None, 1, 3) == 7
    assert score([True, False], 10, 0, None, 1, 2) == 3


def test_time_bonus_offsets_penalties():
    # bonus floor(10 * 0.5 * 0.2) = 1, attempt penalty 2
    assert score([True], 10, 15_000, 30, 2, 0) == 9


def test_time_bonus_only_when_fully_correct():
    assert score([True, False], 10, 0, 30, 1, 0) == 5


def test_score_never_exceeds_point_value():
    assert score([True], 10, 0, 30, 1, 0) == 10


def test_overtime_earns_no_bonus():
    assert score([True], 10, 45_000, 30, 2, 0) == 8


def test_custom_policy():
    policy = ScoringPolicy(attempt_penalty=1, bonus_factor=0.0)
    assert score([True], 10, 0, 30, 3, 0, policy=policy) == 8


def test_time_bonus():
    assert time_bonus(10, 0, 30, 0.2) == 2
    assert time_bonus(10, 15_000, 30, 0.2) == 1
    assert time_bonus(10, 30_000, 30, 0.2) == 0
    assert time_bonus(10, 0, None, 0.2) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(6.4) == 6
    assert round_half_up(0.5) == 1
