"""
Game generation.

``GameGenerator.generate`` walks a fixed sequence of states:

    ALLOCATING_DATE -> SELECTING_QUESTIONS -> SELECTING_FINAL
        -> ASSEMBLING -> PERSISTING -> DONE

and lands in FAILED if any step raises. Nothing is written to disk before
PERSISTING, so a failed run leaves the games directory and the ledger as
they were.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum

from triviagen.dates import DateAllocator
from triviagen.eligibility import EligibilityFilter
from triviagen.errors import (ArchiveError, GenerationError, NotEnoughFinalsError,
                              NotEnoughQuestionsError)
from triviagen.models import Clue, FinalTrivia, Game, game_id_for
from triviagen.selection import NUM_ROUNDS, QUESTIONS_PER_ROUND, CategorySelector, assemble_round
from triviagen.store import ClueStore, GameStore

log = logging.getLogger(__name__)

QUESTIONS_NEEDED = NUM_ROUNDS * QUESTIONS_PER_ROUND


class GenerationState(Enum):
    ALLOCATING_DATE = "allocating date"
    SELECTING_QUESTIONS = "selecting questions"
    SELECTING_FINAL = "selecting final"
    ASSEMBLING = "assembling"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationResult:
    game_id: str
    date: str
    created: bool
    game: Game | None = None


def ledger_keys(clues: list[Clue]) -> list[str]:
    """Archive keys of ``clues``, plus the shown text where it was rewritten."""
    keys = []
    for clue in clues:
        keys.append(clue.key)
        if clue.display_key != clue.key:
            keys.append(clue.display_key)
    return keys


class GameGenerator:

    def __init__(self, clues: ClueStore, games: GameStore, eligibility: EligibilityFilter,
                 rng: random.Random | None = None, dates: DateAllocator | None = None):
        self.clues = clues
        self.games = games
        self.eligibility = eligibility
        self.rng = rng or random.Random()
        self.dates = dates or DateAllocator(games.exists)
        self.state: GenerationState | None = None

    def _enter(self, state: GenerationState) -> None:
        log.debug(f"State: {state.value}")
        self.state = state

    def generate(self, requested_date: str | None = None, persist: bool = True) -> GenerationResult:
        try:
            return self._run(requested_date, persist)
        except GenerationError as e:
            if e.state is None:
                e.state = self.state
            self.state = GenerationState.FAILED
            raise
        except Exception:
            self.state = GenerationState.FAILED
            raise

    def _run(self, requested_date: str | None, persist: bool) -> GenerationResult:
        self._enter(GenerationState.ALLOCATING_DATE)
        date, exists = self.dates.next_available(requested_date)
        game_id = game_id_for(date)
        if exists:
            log.info(f"Game {game_id} already exists")
            self._enter(GenerationState.DONE)
            return GenerationResult(game_id, date, created=False)
        if requested_date is None:
            log.info(f"No date specified, using next available date: {date}")

        if not self.clues.clues:
            raise ArchiveError("Archive is empty. Please run the scraper first.")

        log.info(f"Generating game for {date}…")
        log.info(f"Archive contains {len(self.clues.clues)} questions")
        log.info(f"{len(self.clues.used)} questions already used")

        self._enter(GenerationState.SELECTING_QUESTIONS)
        questions = self._eligible(final=False)
        if len(questions) < QUESTIONS_NEEDED:
            raise NotEnoughQuestionsError(
                f"Not enough available questions. Need {QUESTIONS_NEEDED}, have {len(questions)}"
            )

        self._enter(GenerationState.SELECTING_FINAL)
        finals = self._eligible(final=True)
        if not finals:
            raise NotEnoughFinalsError("Not enough available Final Jeopardy questions")
        final = self.rng.choice(finals)

        self._enter(GenerationState.ASSEMBLING)
        selector = CategorySelector(questions, self.rng)
        rounds, picked = [], []
        for i in range(NUM_ROUNDS):
            chosen = selector.select_round(i)
            picked.extend(chosen)
            rounds.append(assemble_round(i + 1, chosen))

        game = Game(
            id=game_id,
            date=date,
            rounds=tuple(rounds),
            final_trivia=FinalTrivia(final.category, final.clue, final.answer),
        )

        if persist:
            self._enter(GenerationState.PERSISTING)
            self._persist(game, picked + [final])

        self._enter(GenerationState.DONE)
        return GenerationResult(game_id, date, created=persist, game=game)

    def _eligible(self, final: bool) -> list[Clue]:
        label = "Final Jeopardy questions" if final else "questions"
        kept = self.eligibility.filter(self.clues.available(final=final), label)
        # A rewrite can land on text that was already shown in an earlier game
        return [c for c in kept if not self.clues.is_used(c)]

    def _persist(self, game: Game, used: list[Clue]) -> None:
        path = self.games.path_for(game.id)
        previous = path.read_bytes() if path.exists() else None
        self.games.save(game)
        try:
            self.clues.commit(ledger_keys(used))
        except Exception:
            if previous is None:
                log.error(f"Ledger update failed, removing {game.id}")
                self.games.delete(game.id)
            else:
                log.error(f"Ledger update failed, restoring previous {game.id}")
                path.write_bytes(previous)
            raise
        try:
            self.games.update_index()
        except OSError as e:
            log.warning(f"Could not update games index: {e}")
