"""
JSON-file persistence for the clue archive, the used-clue ledger and the
generated games.

Selection code never reads or writes files itself; it receives a
``ClueStore`` and a ``GameStore`` and only the generator's persisting step
calls ``ClueStore.commit`` and ``GameStore.save``.
"""

import hashlib
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from triviagen.errors import ArchiveError
from triviagen.models import Clue, Game, game_id_for

log = logging.getLogger(__name__)

INDEX_NAME = "index.json"


def write_json_atomic(path: Path, data) -> None:
    """Write ``data`` to a sibling temp file, then rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def _read_json(path: Path, what: str):
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ArchiveError(f"{what} {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Cannot read {what} {path}: {e}") from e


def parse_archive(records: list) -> list[Clue]:
    """Turn raw archive records into clues, skipping unusable ones."""
    clues, seen = [], set()
    skipped = duplicates = 0
    for record in records:
        try:
            clue = Clue.from_record(record)
        except (ValueError, TypeError, AttributeError):
            skipped += 1
            continue
        if not clue.clue or not clue.answer:
            skipped += 1
            continue
        if clue.key in seen:
            duplicates += 1
            continue
        seen.add(clue.key)
        clues.append(clue)
    if skipped:
        log.warning(f"Skipped {skipped} malformed archive record(s)")
    if duplicates:
        log.debug(f"Collapsed {duplicates} duplicate clue(s)")
    return clues


class ClueStore:
    """The clue archive plus the ledger of clues already used in a game."""

    def __init__(self, clues: list[Clue], used: set[str] | None = None,
                 used_path: Path | None = None):
        self.clues = list(clues)
        self.used = set(used or ())
        self.used_path = used_path

    @classmethod
    def load(cls, archive_path: Path, used_path: Path) -> "ClueStore":
        if not archive_path.exists():
            raise ArchiveError(f"Archive file not found: {archive_path}")
        records = _read_json(archive_path, "archive")
        if not isinstance(records, list):
            raise ArchiveError(f"Archive {archive_path} must hold a JSON array")
        used: set[str] = set()
        if used_path.exists():
            data = _read_json(used_path, "ledger")
            if not isinstance(data, list):
                raise ArchiveError(f"Ledger {used_path} must hold a JSON array")
            used = {str(k) for k in data}
        return cls(parse_archive(records), used, used_path)

    def is_used(self, clue: Clue) -> bool:
        return clue.key in self.used or clue.display_key in self.used

    def available(self, final: bool) -> list[Clue]:
        """Unused clues, either the finals or everything else."""
        return [c for c in self.clues if c.is_final == final and not self.is_used(c)]

    def commit(self, keys) -> None:
        """Append ``keys`` to the ledger and persist it."""
        updated = self.used | set(keys)
        if self.used_path is not None:
            write_json_atomic(self.used_path, sorted(updated))
        self.used = updated
        log.info(f"Updated used questions tracking ({len(self.used)} total)")


class GameStore:
    """A directory of ``game-<date>.json`` files plus its ``index.json``."""

    def __init__(self, games_dir: Path):
        self.games_dir = Path(games_dir)

    def path_for(self, game_id: str) -> Path:
        return self.games_dir / f"{game_id}.json"

    def exists(self, date: str) -> bool:
        return self.path_for(game_id_for(date)).exists()

    def load(self, game_id: str) -> dict:
        return _read_json(self.path_for(game_id), "game")

    def save(self, game: Game) -> Path:
        path = self.path_for(game.id)
        write_json_atomic(path, game.to_dict())
        log.info(f"Game saved to {path}")
        return path

    def delete(self, game_id: str) -> None:
        path = self.path_for(game_id)
        if path.exists():
            path.unlink()

    def game_ids(self) -> list[str]:
        if not self.games_dir.exists():
            return []
        return sorted(
            (p.stem for p in self.games_dir.glob("game-*.json")),
            reverse=True,
        )

    def update_index(self) -> dict:
        ids = self.game_ids()
        version = hashlib.md5(",".join(sorted(ids)).encode("utf-8")).hexdigest()[:8]
        index = {
            "version":     version,
            "lastUpdated": datetime.now().isoformat(),
            "count":       len(ids),
            "games":       ids,
        }
        write_json_atomic(self.games_dir / INDEX_NAME, index)
        log.info(f"Updated games index with {len(ids)} games (version: {version})")
        return index
