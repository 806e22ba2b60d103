"""
Decide which archive clues can be shown out of their original category.

Many clues only make sense next to their category title (anagram
categories, "I'm in Sephora without my glasses" style themes). The filter
asks a classifier whether to drop each clue and, when a clue leans on its
category's framing, asks a rewriter for a self-contained version.

Two classifier/rewriter pairs exist: the Claude-backed ones in
``triviagen.llm`` and the local heuristics below. Which pair is used is
decided once, when the filter is built.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

from triviagen.models import Clue

log = logging.getLogger(__name__)

PROGRESS_EVERY = 10


@dataclass(frozen=True)
class Verdict:
    disqualify: bool = False
    needs_rewrite: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class Evaluation:
    drop: bool
    rewritten_text: str | None = None
    reason: str | None = None


class Classifier(Protocol):
    def classify(self, clue: Clue) -> Verdict: ...


class Rewriter(Protocol):
    def rewrite(self, clue: Clue) -> str: ...


def _normalize(text: str) -> str:
    return text.lower().replace("’", "'").replace("‘", "'")


class HeuristicClassifier:
    """Pattern matching on category names and clue phrasing."""

    # Wordplay categories whose clues are unanswerable without the title
    DISQUALIFY_PATTERNS = [
        r'anagram', r'scramble', r'rearrange',
    ]

    # First-person theme framing that reads oddly out of context
    THEME_PHRASES = [
        "i'm in", "without my", "can't read", "my wet hair",
    ]

    MIN_CATEGORY_REFERENCE = 4

    def __init__(self):
        self.disqualify_re = re.compile('|'.join(self.DISQUALIFY_PATTERNS), re.IGNORECASE)

    def classify(self, clue: Clue) -> Verdict:
        if self.disqualify_re.search(clue.category):
            return Verdict(disqualify=True, reason="Anagram category")
        if self.has_theme_phrase(clue):
            return Verdict(needs_rewrite=True, reason="May need rewriting")
        return Verdict()

    def has_theme_phrase(self, clue: Clue) -> bool:
        text = _normalize(clue.clue)
        if any(phrase in text for phrase in self.THEME_PHRASES):
            return True
        return "i'm in" in _normalize(clue.category)

    def references_category(self, clue: Clue) -> bool:
        """True when the clue repeats its own category title."""
        name = re.sub(r'["\'“”]', '', _normalize(clue.category)).strip()
        if len(name) < self.MIN_CATEGORY_REFERENCE:
            return False
        return re.search(r'\b' + re.escape(name) + r'\b', _normalize(clue.clue)) is not None

    def needs_rewrite(self, clue: Clue) -> bool:
        return self.has_theme_phrase(clue) or self.references_category(clue)


class PassThroughRewriter:
    """Rewriter used when no LLM is configured: keeps the clue unchanged."""

    def rewrite(self, clue: Clue) -> str:
        return clue.clue


class EligibilityFilter:

    def __init__(self, classifier: Classifier, rewriter: Rewriter,
                 heuristics: HeuristicClassifier | None = None, workers: int = 1):
        self.classifier = classifier
        self.rewriter = rewriter
        self.heuristics = heuristics or HeuristicClassifier()
        self.workers = max(1, workers)

    @classmethod
    def heuristic(cls) -> "EligibilityFilter":
        heuristics = HeuristicClassifier()
        return cls(heuristics, PassThroughRewriter(), heuristics)

    def evaluate(self, clue: Clue) -> Evaluation:
        try:
            verdict = self.classifier.classify(clue)
        except Exception as e:
            log.warning(f"Classifier failed, keeping question: {e} - {clue.clue[:50]}…")
            verdict = Verdict()
        if verdict.disqualify:
            return Evaluation(drop=True, reason=verdict.reason)

        if not (verdict.needs_rewrite or self.heuristics.needs_rewrite(clue)):
            return Evaluation(drop=False, reason=verdict.reason)

        log.debug(f"Rewriting question: {clue.clue[:50]}…")
        try:
            text = (self.rewriter.rewrite(clue) or "").strip()
        except Exception as e:
            log.warning(f"Rewriter failed, keeping original text: {e} - {clue.clue[:50]}…")
            text = ""
        if not text or text == clue.clue:
            return Evaluation(drop=False, reason=verdict.reason)
        return Evaluation(drop=False, rewritten_text=text, reason=verdict.reason)

    def filter(self, clues: list[Clue], label: str = "questions") -> list[Clue]:
        """Return the admissible clues, rewritten where needed, in input order."""
        total = len(clues)
        log.info(f"Filtering {total} {label} for out-of-context suitability…")

        if self.workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(self.evaluate, clues))
        else:
            results = []
            for i, clue in enumerate(clues, 1):
                results.append(self.evaluate(clue))
                if i % PROGRESS_EVERY == 0:
                    log.debug(f"  Processed {i}/{total} {label}…")

        kept, dropped, rewritten = [], 0, 0
        for clue, result in zip(clues, results):
            if result.drop:
                dropped += 1
                log.info(f"  Disqualified: {result.reason or 'no reason given'} - {clue.clue[:50]}…")
                continue
            if result.rewritten_text:
                rewritten += 1
                clue = clue.rewritten(result.rewritten_text)
            kept.append(clue)

        log.info(f"Filtered to {len(kept)} suitable {label} "
                 f"({dropped} disqualified, {rewritten} rewritten)")
        return kept
