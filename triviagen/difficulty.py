"""
Difficulty scoring.

A clue's dollar value is mapped onto a 0-100 scale according to the show
round it came from: first-round values ($200-$1000) cover 0-20,
second-round values ($400-$2000) cover 20-60, and finals are pinned at 80.
"""

from triviagen.models import EASY, EXPERT, HARD, MEDIUM, Clue, RoundOrigin

FINAL_SCORE = 80.0


def score(clue: Clue) -> float:
    if clue.origin is RoundOrigin.FIRST:
        raw = (clue.value - 200) / 800 * 20
    elif clue.origin is RoundOrigin.SECOND:
        raw = 20 + (clue.value - 400) / 1600 * 40
    else:
        raw = FINAL_SCORE
    return max(0.0, min(100.0, raw))


def tier_for(value: float) -> str:
    if value < 10:
        return EASY
    if value < 30:
        return MEDIUM
    if value < 50:
        return HARD
    return EXPERT


def tier(clue: Clue) -> str:
    return tier_for(score(clue))


def average_tier(clues) -> str:
    """Tier of the mean score of ``clues``."""
    scores = [score(c) for c in clues]
    return tier_for(sum(scores) / len(scores))
