"""
Round-by-round category selection.

Every round takes three clues from one category, and a category is used
at most once per game. Rounds ramp from easy to expert; when a category
lacks clues at the target tier, the next easier tier fills the gap.
"""

import logging
import random

from triviagen import difficulty
from triviagen.errors import InsufficientCategoriesError
from triviagen.models import EASY, EXPERT, HARD, MEDIUM, TIERS, Clue, GeneratedQuestion, Round

log = logging.getLogger(__name__)

NUM_ROUNDS = 8
QUESTIONS_PER_ROUND = 3

# Target tier by round index
ROUND_TARGETS = (EASY, EASY, MEDIUM, MEDIUM, HARD, HARD, EXPERT, EXPERT)

# Acceptable tiers per target, in order of preference; never harder than the target
FALLBACK_TIERS = {
    EXPERT: (EXPERT, HARD),
    HARD:   (HARD, MEDIUM),
    MEDIUM: (MEDIUM, EASY),
    EASY:   (EASY,),
}


def target_tier(round_index: int) -> str:
    return ROUND_TARGETS[round_index]


def group_by_category(clues: list[Clue]) -> dict[str, dict[str, list[Clue]]]:
    grouped: dict[str, dict[str, list[Clue]]] = {}
    for clue in clues:
        tiers = grouped.setdefault(clue.category, {t: [] for t in TIERS})
        tiers[difficulty.tier(clue)].append(clue)
    return grouped


def _remaining_tier_order(target: str) -> list[str]:
    """Tiers outside the fallback set, nearest to ``target`` first, easier on ties."""
    pos = TIERS.index(target)
    rest = [t for t in TIERS if t not in FALLBACK_TIERS[target]]
    return sorted(rest, key=lambda t: (abs(TIERS.index(t) - pos), TIERS.index(t)))


class CategorySelector:
    """Picks the categories and clues for each round of one game.

    The category order is shuffled once, when the selector is built; each
    round then takes the first unused category in that order that can
    supply enough clues.
    """

    def __init__(self, clues: list[Clue], rng: random.Random | None = None,
                 per_round: int = QUESTIONS_PER_ROUND):
        self.rng = rng or random.Random()
        self.per_round = per_round
        self.pool = group_by_category(clues)
        self.order = list(self.pool)
        self.rng.shuffle(self.order)
        self.used_categories: set[str] = set()
        self.selected_keys: set[str] = set()

    def _available(self, category: str, tiers) -> list[Clue]:
        """Unpicked clues of ``category`` in ``tiers``, one per archive or shown pair."""
        data = self.pool[category]
        seen = set(self.selected_keys)
        available = []
        for tier in tiers:
            for c in data[tier]:
                if c.key in seen or c.display_key in seen:
                    continue
                seen.update((c.key, c.display_key))
                available.append(c)
        return available

    def find_category(self, round_index: int) -> str | None:
        target = target_tier(round_index)
        unused = [c for c in self.order if c not in self.used_categories]

        for category in unused:
            if len(self._available(category, FALLBACK_TIERS[target])) >= self.per_round:
                return category

        for category in unused:
            if len(self._available(category, TIERS)) >= self.per_round:
                log.debug(f"Round {round_index + 1}: no {target} category left, "
                          f"relaxing to any tier ({category})")
                return category
        return None

    def select_round(self, round_index: int) -> list[Clue]:
        category = self.find_category(round_index)
        if category is None:
            raise InsufficientCategoriesError(
                f"Could not find a category with enough questions for round {round_index + 1}",
                round_index,
            )
        self.used_categories.add(category)

        target = target_tier(round_index)
        tier_order = list(FALLBACK_TIERS[target]) + _remaining_tier_order(target)
        candidates: list[Clue] = []
        for n in range(1, len(tier_order) + 1):
            candidates = self._available(category, tier_order[:n])
            if len(candidates) >= self.per_round:
                break

        self.rng.shuffle(candidates)
        chosen = candidates[:self.per_round]
        for c in chosen:
            self.selected_keys.update((c.key, c.display_key))
        log.debug(f"Round {round_index + 1} ({target}): {category}")
        return chosen

    def select_rounds(self, num_rounds: int = NUM_ROUNDS) -> list[list[Clue]]:
        return [self.select_round(i) for i in range(num_rounds)]


def assemble_round(round_number: int, clues: list[Clue]) -> Round:
    """Build a Round whose difficulty reflects the clues actually picked."""
    return Round(
        round_number=round_number,
        difficulty=difficulty.average_tier(clues),
        questions=tuple(GeneratedQuestion(c.clue, c.answer, c.category) for c in clues),
    )
