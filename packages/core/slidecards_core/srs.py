"""Spaced-repetition scheduling.

A minimal SM-2 style scheduler: the next state depends only on the current
interval, repetition count and ease, plus the review grade.
"""

import math
from enum import IntEnum

from slidecards_core.schemas.cards import SrsState
from slidecards_core.utils.ids import now_ms

DAY_MS = 86_400_000
MIN_EASE = 1.3
HARD_EASE_PENALTY = 0.2
EASY_EASE_BONUS = 0.15


class ReviewQuality(IntEnum):
    """Review grades offered after each card."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def schedule(state: SrsState, quality: int, now: int | None = None) -> SrsState:
    """Compute the scheduling state after a review.

    Args:
        state: Current scheduling state of the card
        quality: Review grade, 1 (again) to 4 (easy)
        now: Review time in epoch milliseconds (defaults to the current time)

    Returns:
        New scheduling state with ``next_review_at`` set from ``now``

    Raises:
        ValueError: If the grade is not between 1 and 4
    """
    try:
        grade = ReviewQuality(quality)
    except ValueError as e:
        raise ValueError(f"Review quality must be 1-4, got {quality!r}") from e

    reviewed_at = now_ms() if now is None else now
    ease = state.ease

    if grade == ReviewQuality.AGAIN:
        reps = 0
        interval = 1
    else:
        reps = state.reps + 1
        if reps == 1:
            interval = 1
        elif reps == 2:
            interval = 6
        else:
            interval = _round_half_up(state.interval * state.ease)

        if grade == ReviewQuality.HARD:
            ease = max(MIN_EASE, ease - HARD_EASE_PENALTY)
        elif grade == ReviewQuality.EASY:
            ease = ease + EASY_EASE_BONUS

    return SrsState(
        interval=interval,
        ease=ease,
        reps=reps,
        next_review_at=reviewed_at + interval * DAY_MS,
    )
