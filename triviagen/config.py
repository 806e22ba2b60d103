"""
Runtime configuration.

Defaults live in the constants below; ``Settings.from_env`` layers the
environment on top of them and the CLI layers its flags on top of that.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from triviagen.errors import ConfigError

# ── Paths ──────────────────────────────────────────────────────────────────

BASE_DIR     = Path.cwd()
DATA_DIR     = BASE_DIR / "data"
ARCHIVE_NAME = "archive-backup.json"
USED_NAME    = "used-questions.json"
GAMES_NAME   = "games"

# ── Config ─────────────────────────────────────────────────────────────────

MODEL         = "claude-sonnet-4-6"
CALL_DELAY    = 0.2    # seconds between calls to the classifier/rewriter
CALL_TIMEOUT  = 30.0   # per-call timeout, after which the clue is kept as-is
MAX_RETRIES   = 2
WORKERS       = 1


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DATA_DIR
    archive_file: Path | None = None
    used_file: Path | None = None
    games_dir: Path | None = None
    api_key: str | None = field(default=None, repr=False)
    model: str = MODEL
    call_delay: float = CALL_DELAY
    call_timeout: float = CALL_TIMEOUT
    max_retries: int = MAX_RETRIES
    workers: int = WORKERS
    log_file: Path | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.environ.get("TRIVIAGEN_DATA_DIR") or DATA_DIR)
        log_file = os.environ.get("TRIVIAGEN_LOG_FILE")
        return cls(
            data_dir=data_dir,
            api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            model=os.environ.get("TRIVIAGEN_MODEL") or MODEL,
            call_delay=_env_float("TRIVIAGEN_CALL_DELAY", CALL_DELAY),
            call_timeout=_env_float("TRIVIAGEN_CALL_TIMEOUT", CALL_TIMEOUT),
            workers=_env_int("TRIVIAGEN_WORKERS", WORKERS),
            log_file=Path(log_file) if log_file else None,
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def archive_path(self) -> Path:
        return self.archive_file or self.data_dir / ARCHIVE_NAME

    @property
    def used_path(self) -> Path:
        return self.used_file or self.data_dir / USED_NAME

    @property
    def games_path(self) -> Path:
        return self.games_dir or self.data_dir / GAMES_NAME

    @property
    def llm_enabled(self) -> bool:
        return bool(self.api_key)
