from __future__ import annotations

from pathlib import Path

import anjali_cli


def feed(monkeypatch, lines):
    answers = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)


def test_parse_args_defaults():
    args = anjali_cli.parse_args([])

    assert args.data_path == Path("data")
    assert args.backend == "json"
    assert args.config is None
    assert args.verbose is False


def test_teach_ask_and_upvote(monkeypatch, capsys):
    feed(monkeypatch, [
        "/teach संविधान कब बना | 1950",
        "संविधान कब बना",
        "/+",
        "/stats",
        "/quit",
    ])

    assert anjali_cli.main(["--backend", "memory"]) == 0

    out = capsys.readouterr().out
    assert "Learned: संविधान कब बना → 1950" in out
    assert "Anjali: 1950" in out
    assert "Upvoted" in out
    assert "Concepts: 1" in out
    assert "Asking when something happened: 1" in out


def test_commands_report_problems(monkeypatch, capsys):
    feed(monkeypatch, [
        "/teach बिना उत्तर",
        "/-",
        "/forget concept_missing",
        "/dance",
    ])

    assert anjali_cli.main(["--backend", "memory"]) == 0

    out = capsys.readouterr().out
    assert "Usage: /teach" in out
    assert "No recent answer to downvote" in out
    assert "No concept 'concept_missing'" in out
    assert "Unknown command: /dance" in out


def test_memory_persists_between_runs(monkeypatch, capsys, tmp_path):
    feed(monkeypatch, ["/teach ताजमहल कहाँ है | आगरा"])
    anjali_cli.main(["--data-path", str(tmp_path), "--backend", "sqlite"])

    feed(monkeypatch, ["ताजमहल कहाँ है"])
    anjali_cli.main(["--data-path", str(tmp_path), "--backend", "sqlite"])

    assert "Anjali: आगरा" in capsys.readouterr().out
