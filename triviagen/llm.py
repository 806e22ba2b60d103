"""
Claude-backed classifier and rewriter.

Both adapters fail open: an API error, a timeout or an unparseable reply
is logged and the clue is kept with its original text.
"""

import json
import logging
import re
import threading
import time

import anthropic

from triviagen.eligibility import Verdict
from triviagen.models import Clue

log = logging.getLogger(__name__)

# ── Prompts ────────────────────────────────────────────────────────────────

CLASSIFY_SYSTEM = """You are evaluating trivia questions for a pub trivia game. \
Questions are shown without their original category title. Disqualify questions that:
1. Are from categories that rely on wordplay, anagrams, or category-specific themes that won't work without the category context
2. Require knowledge of the category name to answer (e.g., "I'm in Sephora without my glasses" category questions)
3. Are too meta or self-referential

If the question is usable but its wording leans on the category's theme, set needsRewrite.

Respond with ONLY a JSON object: {"shouldDisqualify": boolean, "needsRewrite": boolean, "reason": "brief explanation"}"""

REWRITE_SYSTEM = """You are rewriting trivia questions to remove category-specific themes and focus on the actual content.
For example, "Can't read the label on this spray-pump bottle; my wet hair needs nourishing & detangling, so I hope it's leave-in this type of product"
should become "This type of hair product is used for nourishing and detangling wet hair, often applied as a leave-in treatment."

Keep the same answer and maintain the difficulty level. Reply with ONLY the rewritten clue text, no explanation."""

FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def build_client(api_key: str, timeout: float, max_retries: int) -> anthropic.Anthropic:
    return anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=max_retries)


def clue_prompt(clue: Clue) -> str:
    return f"Category: {clue.category}\nClue: {clue.clue}\nAnswer: {clue.answer}"


class Pacer:
    """Fixed minimum interval between calls, shared across threads."""

    def __init__(self, delay: float, clock=time.monotonic, sleep=time.sleep):
        self.delay = delay
        self.clock = clock
        self.sleep = sleep
        self.last_call = None
        self._lock = threading.Lock()

    def wait(self):
        with self._lock:
            now = self.clock()
            if self.last_call is not None:
                elapsed = now - self.last_call
                if elapsed < self.delay:
                    self.sleep(self.delay - elapsed)
                    now = self.clock()
            self.last_call = now


class ClaudeClient:
    """Thin wrapper that paces calls and returns the reply text."""

    def __init__(self, client, model: str, pacer: Pacer):
        self.client = client
        self.model = model
        self.pacer = pacer

    def complete(self, system: str, prompt: str, max_tokens: int) -> str:
        self.pacer.wait()
        log.debug(f"Calling API ({self.model})…")
        message = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        return message.content[0].text


def parse_verdict(text: str) -> Verdict:
    data = json.loads(FENCE_RE.sub("", text.strip()))
    if not isinstance(data, dict) or "shouldDisqualify" not in data:
        raise ValueError(f"unexpected classifier reply: {text[:80]!r}")
    disqualify = data["shouldDisqualify"]
    if not isinstance(disqualify, bool):
        raise ValueError(f"shouldDisqualify is not a boolean: {disqualify!r}")
    reason = data.get("reason")
    reason = str(reason) if reason else None
    if "needsRewrite" in data:
        needs_rewrite = data["needsRewrite"]
        if not isinstance(needs_rewrite, bool):
            raise ValueError(f"needsRewrite is not a boolean: {needs_rewrite!r}")
    else:
        needs_rewrite = "may need rewriting" in (reason or "").lower()
    return Verdict(
        disqualify=disqualify,
        needs_rewrite=needs_rewrite,
        reason=reason,
    )


class ClaudeClassifier:

    def __init__(self, claude: ClaudeClient, max_tokens: int = 200):
        self.claude = claude
        self.max_tokens = max_tokens

    def classify(self, clue: Clue) -> Verdict:
        prompt = clue_prompt(clue) + "\n\nShould this question be disqualified?"
        try:
            text = self.claude.complete(CLASSIFY_SYSTEM, prompt, self.max_tokens)
            return parse_verdict(text)
        except anthropic.APIError as e:
            log.warning(f"Error checking question disqualification: {e}")
        except (ValueError, IndexError, AttributeError) as e:
            log.warning(f"Malformed classifier response, keeping question: {e}")
        return Verdict()


class ClaudeRewriter:

    def __init__(self, claude: ClaudeClient, max_tokens: int = 300):
        self.claude = claude
        self.max_tokens = max_tokens

    def rewrite(self, clue: Clue) -> str:
        prompt = clue_prompt(clue) + "\n\nRewrite the clue to remove the category theme:"
        try:
            text = self.claude.complete(REWRITE_SYSTEM, prompt, self.max_tokens)
        except anthropic.APIError as e:
            log.warning(f"Error rewriting question: {e}")
            return clue.clue
        except (IndexError, AttributeError) as e:
            log.warning(f"Malformed rewriter response, keeping question: {e}")
            return clue.clue
        text = text.strip().strip('"').strip("'").strip()
        return text or clue.clue
