"""
Records passed through the pipeline.

``Clue`` is the archive-side record; ``GeneratedQuestion``, ``Round``,
``FinalTrivia`` and ``Game`` are the output side, whose ``to_dict`` key
names and order are what downstream renderers read.
"""

from dataclasses import dataclass, replace
from enum import Enum


class RoundOrigin(Enum):
    FIRST = "Jeopardy"
    SECOND = "Double Jeopardy"
    FINAL = "Final Jeopardy"

    @classmethod
    def from_label(cls, label: str) -> "RoundOrigin":
        for origin in cls:
            if origin.value == label:
                return origin
        raise ValueError(f"Unknown round label: {label!r}")


EASY, MEDIUM, HARD, EXPERT = "easy", "medium", "hard", "expert"
TIERS = (EASY, MEDIUM, HARD, EXPERT)


def clue_key(clue_text: str, answer_text: str) -> str:
    return f"{clue_text}|{answer_text}"


@dataclass(frozen=True)
class Clue:
    clue: str
    answer: str
    category: str
    value: int = 0
    origin: RoundOrigin = RoundOrigin.FIRST
    source_game_id: str = ""
    air_date: str = ""
    original_clue: str | None = None

    @classmethod
    def from_record(cls, record: dict) -> "Clue":
        return cls(
            clue=(record.get("clue") or "").strip(),
            answer=(record.get("answer") or "").strip(),
            category=(record.get("category") or "").strip(),
            value=int(record.get("value") or 0),
            origin=RoundOrigin.from_label(record.get("round", "")),
            source_game_id=str(record.get("gameId") or ""),
            air_date=str(record.get("airDate") or ""),
        )

    @property
    def key(self) -> str:
        """Ledger key of the clue as it appears in the archive."""
        return clue_key(self.original_clue or self.clue, self.answer)

    @property
    def display_key(self) -> str:
        """Ledger key of the clue as it will be shown in a game."""
        return clue_key(self.clue, self.answer)

    @property
    def is_final(self) -> bool:
        return self.origin is RoundOrigin.FINAL

    def rewritten(self, text: str) -> "Clue":
        if text == self.clue:
            return self
        return replace(self, clue=text, original_clue=self.original_clue or self.clue)


@dataclass(frozen=True)
class GeneratedQuestion:
    clue: str
    answer: str
    category: str

    def to_dict(self) -> dict:
        return {"clue": self.clue, "answer": self.answer, "category": self.category}


@dataclass(frozen=True)
class Round:
    round_number: int
    difficulty: str
    questions: tuple[GeneratedQuestion, ...]

    def to_dict(self) -> dict:
        return {
            "roundNumber": self.round_number,
            "difficulty":  self.difficulty,
            "questions":   [q.to_dict() for q in self.questions],
        }


@dataclass(frozen=True)
class FinalTrivia:
    category: str
    question: str
    answer: str

    def to_dict(self) -> dict:
        return {"category": self.category, "question": self.question, "answer": self.answer}


@dataclass(frozen=True)
class Game:
    id: str
    date: str
    rounds: tuple[Round, ...]
    final_trivia: FinalTrivia

    def to_dict(self) -> dict:
        return {
            "id":          self.id,
            "date":        self.date,
            "rounds":      [r.to_dict() for r in self.rounds],
            "finalTrivia": self.final_trivia.to_dict(),
        }


def game_id_for(date: str) -> str:
    return f"game-{date}"
