"""Tests for triviagen/cli.py."""

import json
import logging

import pytest

from triviagen.cli import build_filter, main, parse_args, run
from triviagen.config import Settings
from triviagen.eligibility import HeuristicClassifier, PassThroughRewriter
from triviagen.llm import ClaudeClassifier, ClaudeRewriter


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ANTHROPIC_API_KEY", "TRIVIAGEN_DATA_DIR", "TRIVIAGEN_WORKERS",
                 "TRIVIAGEN_CALL_DELAY", "TRIVIAGEN_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


def test_generates_game_and_prints_id(data_dir, capsys):
    code = run(parse_args(["--data-dir", str(data_dir), "--date", "2026-10-20", "--seed", "3"]))
    out = capsys.readouterr().out
    assert code == 0
    assert out.strip() == "game-2026-10-20"
    assert (data_dir / "games" / "game-2026-10-20.json").exists()
    assert (data_dir / "used-questions.json").exists()


def test_existing_date_prints_id_and_exits_zero(data_dir, capsys):
    args = ["--data-dir", str(data_dir), "--date", "2026-10-20"]
    assert run(parse_args(args)) == 0
    ledger = (data_dir / "used-questions.json").read_text(encoding="utf-8")
    capsys.readouterr()

    assert run(parse_args(args)) == 0
    assert capsys.readouterr().out.strip() == "game-2026-10-20"
    assert (data_dir / "used-questions.json").read_text(encoding="utf-8") == ledger


def test_failure_exits_nonzero_with_reason(tmp_path, capsys):
    d = tmp_path / "data"
    d.mkdir()
    (d / "archive-backup.json").write_text(json.dumps([
        {"clue": "only", "answer": "one", "category": "C", "value": 200, "round": "Jeopardy"},
    ]), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["--data-dir", str(d), "--date", "2026-10-20"])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Not enough available questions" in err
    assert not (d / "games").exists()
    assert not (d / "used-questions.json").exists()


def test_missing_archive_exits_nonzero(tmp_path, capsys):
    assert run(parse_args(["--data-dir", str(tmp_path)])) == 1
    assert "Archive file not found" in capsys.readouterr().err


def test_dry_run_prints_json_only(data_dir, capsys):
    code = run(parse_args(["--data-dir", str(data_dir), "--date", "2026-10-20", "--dry-run"]))
    assert code == 0
    game = json.loads(capsys.readouterr().out)
    assert game["id"] == "game-2026-10-20"
    assert len(game["rounds"]) == 8
    assert not (data_dir / "games").exists()


def test_invalid_date_is_rejected(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--date", "20-10-2026"])
    assert excinfo.value.code == 2


def test_bad_env_number_is_reported(data_dir, monkeypatch, capsys):
    monkeypatch.setenv("TRIVIAGEN_WORKERS", "many")
    assert run(parse_args(["--data-dir", str(data_dir)])) == 1
    assert "TRIVIAGEN_WORKERS" in capsys.readouterr().err


class TestBuildFilter:

    def test_heuristic_without_key(self):
        f = build_filter(Settings(), True, logging.getLogger("test"))
        assert isinstance(f.classifier, HeuristicClassifier)
        assert isinstance(f.rewriter, PassThroughRewriter)

    def test_no_llm_flag_wins_over_key(self):
        f = build_filter(Settings(api_key="sk-test"), False, logging.getLogger("test"))
        assert isinstance(f.classifier, HeuristicClassifier)

    def test_claude_with_key(self):
        f = build_filter(Settings(api_key="sk-test", workers=3), True, logging.getLogger("test"))
        assert isinstance(f.classifier, ClaudeClassifier)
        assert isinstance(f.rewriter, ClaudeRewriter)
        assert f.workers == 3
