"""
Shared pytest fixtures.

Provides:
    - make_clue: factory for Clue objects at a given difficulty tier
    - full_archive: 8 categories x 3 clues per tier, plus two finals
    - data_dir: a temp data directory holding full_archive as JSON
"""

import json
import random
import sys
import zlib
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from triviagen.eligibility import EligibilityFilter  # noqa: E402
from triviagen.generator import GameGenerator  # noqa: E402
from triviagen.models import Clue, RoundOrigin  # noqa: E402
from triviagen.store import ClueStore, GameStore  # noqa: E402

# (origin, dollar values) that land in each tier
TIER_VALUES = {
    "easy":   (RoundOrigin.FIRST, (200, 400, 200)),
    "medium": (RoundOrigin.FIRST, (600, 800, 1000)),
    "hard":   (RoundOrigin.SECOND, (800, 1000, 1200)),
    "expert": (RoundOrigin.SECOND, (1600, 2000, 2000)),
}

CATEGORIES = [
    "WORLD CAPITALS", "OPERA", "THE HUMAN BODY", "U.S. PRESIDENTS",
    "CHEMISTRY", "NOVELS", "MOUNTAINS", "BASEBALL",
]


def _set_code(category: str) -> int:
    return zlib.crc32(category.encode("utf-8"))


def build_clue(category: str, tier: str, n: int = 0, **overrides) -> Clue:
    origin, values = TIER_VALUES[tier]
    fields = dict(
        clue=f"Clue {tier}-{n} from set {_set_code(category)}",
        answer=f"Answer {tier}-{n} from set {_set_code(category)}",
        category=category,
        value=values[n % len(values)],
        origin=origin,
        source_game_id="1234",
    )
    fields.update(overrides)
    return Clue(**fields)


def build_final(n: int = 0, category: str = "FAMOUS NAMES") -> Clue:
    return Clue(
        clue=f"Final clue #{n}",
        answer=f"Final answer #{n}",
        category=category,
        value=0,
        origin=RoundOrigin.FINAL,
    )


def build_archive(categories=CATEGORIES, tiers=("easy", "medium", "hard", "expert"),
                  per_tier: int = 3, finals: int = 2) -> list[Clue]:
    clues = [
        build_clue(cat, tier, n)
        for cat in categories
        for tier in tiers
        for n in range(per_tier)
    ]
    clues.extend(build_final(n) for n in range(finals))
    return clues


def to_record(clue: Clue) -> dict:
    return {
        "clue": clue.clue,
        "answer": clue.answer,
        "category": clue.category,
        "value": clue.value,
        "round": clue.origin.value,
        "airDate": "2001-09-10",
        "gameId": clue.source_game_id,
    }


def make_generator(clues, tmp_path, used=None, seed=7, eligibility=None, **kwargs):
    used_path = tmp_path / "used-questions.json"
    store = ClueStore(clues, used, used_path)
    games = GameStore(tmp_path / "games")
    return GameGenerator(
        store, games,
        eligibility or EligibilityFilter.heuristic(),
        rng=random.Random(seed),
        **kwargs,
    )


@pytest.fixture
def make_clue():
    return build_clue


@pytest.fixture
def full_archive():
    return build_archive()


@pytest.fixture
def data_dir(tmp_path, full_archive):
    d = tmp_path / "data"
    d.mkdir()
    with open(d / "archive-backup.json", "w", encoding="utf-8") as f:
        json.dump([to_record(c) for c in full_archive], f)
    return d
