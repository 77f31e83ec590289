"""End-to-end tests through cli.main."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from moodpad.cli import main


@pytest.fixture()
def run(tmp_path: Path, monkeypatch, capsys):
    for name in ("MOODPAD_DATA", "MOODPAD_ON_CORRUPT", "MOODPAD_LOG_LEVEL", "MOODPAD_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    data = tmp_path / "data.json"

    def _run(*argv: str, today: str = "2024-12-08") -> str:
        capsys.readouterr()
        main(["--data", str(data), "--today", today, *argv])
        return capsys.readouterr().out

    _run.data = data
    return _run


# ---- entries ----


def test_add_and_show(run):
    out = run("add", "--emoji", "😊", "--note", "Had a great day!", "--tags", "work,gym")
    assert "Logged 😊 for 2024-12-08" in out

    out = run("show")
    assert "- 🙂 Mood: 😊" in out
    assert "- 🏷️ Tags: work, gym" in out
    assert "- 📝 Notes: Had a great day!" in out


def test_add_persists_json(run):
    run("add", "--emoji", "😢", "--date", "yesterday")
    saved = json.loads(run.data.read_text(encoding="utf-8"))
    assert saved["moodpad_moods"][0]["date"] == "2024-12-07"
    assert saved["moodpad_moods"][0]["emoji"] == "😢"


def test_add_without_tags_keeps_them(run):
    run("add", "--emoji", "😊", "--tags", "work")
    run("add", "--emoji", "😢", "--note", "changed")
    out = run("list")
    assert "2024-12-08 — 😢 [#work] (changed)" in out


def test_show_missing(run):
    assert "No mood logged for 2024-12-08." in run("show")


def test_delete(run):
    run("add", "--emoji", "😊")
    assert "Deleted" in run("delete", "--date", "today")
    assert "No mood entries yet." in run("list")


def test_list_month(run):
    run("add", "--emoji", "😊", "--date", "2024-03-01")
    run("add", "--emoji", "😢", "--date", "2024-04-01")
    out = run("list", "--month", "2024-03")
    assert "2024-03-01" in out
    assert "2024-04-01" not in out


def test_reset_requires_yes(run):
    run("add", "--emoji", "😊")
    with pytest.raises(SystemExit):
        run("reset")
    assert "deleted 1 entries" in run("reset", "--yes")


# ---- analytics ----


def test_stats(run):
    for d in ("2024-12-06", "2024-12-07", "2024-12-08"):
        run("add", "--emoji", "😊", "--date", d)
    out = run("stats")
    assert "- most common mood: 😊" in out
    assert "- current streak: 3 days" in out
    assert "- longest streak: 3 days" in out
    assert "- total entries: 3" in out


def test_trend_empty(run):
    assert "Log some moods" in run("trend")


def test_trend(run):
    run("add", "--emoji", "😍")
    out = run("trend", "--days", "7")
    assert "days logged: 1/7" in out
    assert "average: 5.00/5" in out


def test_insights_need_a_week(run):
    run("add", "--emoji", "😊")
    assert "at least a week" in run("insights")


def test_patterns_and_review(run):
    run("add", "--emoji", "😊", "--date", "2024-03-01")
    out = run("patterns")
    assert "Fri: 😊 (1 entries)" in out
    out = run("review", "--year", "2024")
    assert "Mar: 😊 (1)" in out
    assert "- top mood: 😊" in out


# ---- tags ----


def test_tags_add_remove_list(run):
    run("add", "--emoji", "😊")
    assert "#work" in run("tags", "add", "--tag", "#Work")
    assert "#work: 1" in run("tags", "list")
    assert "(no tags)" in run("tags", "remove", "--tag", "work")


def test_tag_without_entry_fails(run):
    with pytest.raises(SystemExit):
        run("tags", "add", "--tag", "work")


# ---- csv ----


def test_export_then_import(run, tmp_path):
    run("add", "--emoji", "😊", "--note", "deadline, then pizza")
    csv_path = tmp_path / "out" / "moods.csv"
    assert "Exported 1 mood rows" in run("export", "--csv", str(csv_path))
    assert csv_path.read_text(encoding="utf-8").startswith("Date,Emoji,Note\n")

    run("reset", "--yes")
    assert "Imported 1 mood entries" in run("import", "--csv", str(csv_path))
    assert "(deadline, then pizza)" in run("list")


def test_export_nothing(run, tmp_path):
    assert "No mood data to export!" in run("export", "--csv", str(tmp_path / "x.csv"))
    assert not (tmp_path / "x.csv").exists()


def test_import_bad_header(run, tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_text("Day,Feeling\n2024-12-08,😊\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="Import failed"):
        run("import", "--csv", str(bad))


def test_import_missing_file(run, tmp_path):
    with pytest.raises(SystemExit, match="Failed to read"):
        run("import", "--csv", str(tmp_path / "nope.csv"))


# ---- settings ----


def test_theme(run):
    assert "Theme: dark" in run("theme")
    assert "Theme: light" in run("theme", "toggle")
    assert "Theme: dark" in run("theme", "dark")


def test_reminder(run):
    assert "off" in run("reminder")
    assert "on" in run("reminder", "on")
    assert "off" in run("reminder", "off")


def test_reminder_check_uses_today_and_time(run):
    run("reminder", "on")
    assert "How are you feeling today?" in run("reminder", "check", "--time", "20:15")
    assert "No reminder needed" in run("reminder", "check", "--time", "19:00")

    run("add", "--emoji", "😊")
    assert "No reminder needed" in run("reminder", "check", "--time", "20:15")
    out = run("reminder", "check", "--time", "20:15", today="2024-12-09")
    assert "How are you feeling today?" in out


def test_reminder_check_off(run):
    assert "No reminder needed" in run("reminder", "check", "--time", "20:00")


def test_reminder_check_bad_time(run):
    run("reminder", "on")
    with pytest.raises(SystemExit, match="--time must be HH:MM"):
        run("reminder", "check", "--time", "8pm")


def test_emoji(run):
    out = run("emoji", "add", "🦄")
    assert out.strip().endswith("🦄")
    assert "🦄 custom" in run("emoji", "list")
    assert "😊 happy" in run("emoji", "list")
    assert "🦄" not in run("emoji", "remove", "🦄")


def test_demo(run):
    out = run("demo", "--seed", "1")
    assert "Demo data loaded" in out
    saved = json.loads(run.data.read_text(encoding="utf-8"))
    assert saved["moodpad_demo"] == "true"
    assert saved["moodpad_moods"]


# ---- data file handling ----


def test_where(run):
    out = run("where")
    assert run.data.name in out
    assert "because you passed --data" in out


def test_corrupt_file_reads_empty(run):
    run.data.write_text("{{ not json", encoding="utf-8")
    assert "No mood entries yet." in run("list")


def test_corrupt_file_strict_fails(run):
    run.data.write_text("{{ not json", encoding="utf-8")
    with pytest.raises(SystemExit, match="Storage error"):
        run("--strict", "list")
