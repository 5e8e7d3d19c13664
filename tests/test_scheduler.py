import datetime

import pytest

from llm_kanji_srs import scheduler
from llm_kanji_srs.scheduler import INTERVAL_SECONDS, advance, interval_for_level

T = datetime.datetime(2026, 1, 1, 12, 0, 0, tzinfo=datetime.UTC)


def seconds(n: int) -> datetime.timedelta:
    return datetime.timedelta(seconds=n)


def test_interval_table() -> None:
    assert INTERVAL_SECONDS == (10, 30, 60, 120, 300, 600, 1800, 3600)
    for level, secs in enumerate(INTERVAL_SECONDS, 1):
        assert interval_for_level(level) == seconds(secs)


@pytest.mark.parametrize("level", [0, -1, 9, 100])
def test_out_of_range_levels_use_level_one_interval(level: int) -> None:
    assert interval_for_level(level) == seconds(10)


def test_first_correct_answer_learns_item() -> None:
    assert advance(0, False, T, True) == (1, T + seconds(10), True)


def test_correct_on_unlearned_item_restarts_at_level_one() -> None:
    # An item lowered while never learned still enters at level 1
    assert advance(3, False, T, True) == (1, T + seconds(10), True)


def test_correct_answer_climbs_one_level() -> None:
    assert advance(1, True, T, True) == (2, T + seconds(30), True)
    assert advance(4, True, T, True) == (5, T + seconds(300), True)
    assert advance(7, True, T, True) == (8, T + seconds(3600), True)


def test_correct_answer_is_capped_at_level_eight() -> None:
    assert advance(8, True, T, True) == (8, T + seconds(3600), True)


def test_incorrect_answer_drops_one_level() -> None:
    assert advance(5, True, T, False) == (4, T + seconds(120), True)
    assert advance(2, True, T, False) == (1, T + seconds(10), True)


def test_incorrect_answer_is_floored_at_level_one() -> None:
    assert advance(1, True, T, False) == (1, T + seconds(10), True)


def test_incorrect_answer_on_never_learned_item() -> None:
    # Level 0 is raised to the floor of 1, and is_learned is carried unchanged
    new_level, next_review, new_is_learned = advance(0, False, T, False)
    assert new_level == 1
    assert next_review == T + seconds(10)
    assert new_is_learned is False


def test_out_of_range_levels_are_clamped() -> None:
    assert advance(42, True, T, True) == (8, T + seconds(3600), True)
    assert advance(-5, True, T, True) == (1, T + seconds(10), True)
    assert advance(42, True, T, False) == (7, T + seconds(1800), True)


def test_advance_is_deterministic() -> None:
    assert scheduler.advance(3, True, T, True) == scheduler.advance(3, True, T, True)


def test_naive_timestamps_are_supported() -> None:
    naive = T.replace(tzinfo=None)
    assert advance(2, True, naive, True)[1] == naive + seconds(60)
