import datetime
from typing import Tuple

MAX_LEVEL = 8

# Review intervals in seconds, indexed by level - 1 (levels 1..8)
INTERVAL_SECONDS: Tuple[int, ...] = (10, 30, 60, 120, 300, 600, 1800, 3600)


def interval_for_level(level: int) -> datetime.timedelta:
    """Interval until the next review. Level 0 and unknown levels use the level-1 interval."""
    if 1 <= level <= MAX_LEVEL:
        return datetime.timedelta(seconds=INTERVAL_SECONDS[level - 1])
    return datetime.timedelta(seconds=INTERVAL_SECONDS[0])


def advance(
    level: int,
    is_learned: bool,
    now: datetime.datetime,
    correct: bool,
) -> Tuple[int, datetime.datetime, bool]:
    """
    Level-based spaced repetition step.

    Each kanji sits on a level 0..8. Level 0 means it has never been
    answered correctly.

      - correct on an unlearned (or level 0) kanji → level 1
      - correct otherwise                          → level + 1, capped at 8
      - incorrect                                  → level - 1, floored at 1

    An incorrect answer never changes ``is_learned``. The caller owns the
    review counter and ``last_reviewed``.

    Returns:
        (new_level, next_review, new_is_learned)
    """
    # Clamp level to valid range
    level = max(0, min(MAX_LEVEL, int(level)))

    if correct:
        if level == 0 or not is_learned:
            new_level = 1
        else:
            new_level = min(level + 1, MAX_LEVEL)
        new_is_learned = True
    else:
        new_level = max(level - 1, 1)
        new_is_learned = bool(is_learned)

    next_review = now + interval_for_level(new_level)
    return new_level, next_review, new_is_learned
