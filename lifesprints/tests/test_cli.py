from __future__ import annotations

import json
import uuid

from lifesprints.cli import main


def _run(capsys, db, *argv) -> str:
    code = main(["--db", db, *argv])
    out = capsys.readouterr().out.strip()
    assert code == 0, out
    return out


def test_cli_story_workflow(capsys, tmp_db_path, tmp_path):
    _run(capsys, tmp_db_path, "init")
    uid = json.loads(_run(capsys, tmp_db_path, "create-user", "--email", "cli@example.com", "--name", "Cli"))["userId"]
    assert uuid.UUID(uid)

    sid = json.loads(_run(capsys, tmp_db_path, "add-story", "--user", uid, "--title", "Learn Rust", "--year", "2025",
               "--priority", "2", "--hours", "12.5", "--due", "2025-09-01"))["storyId"]
    assert sid > 0
    sid = str(sid)

    first = json.loads(_run(capsys, tmp_db_path, "toggle", "--story", sid, "--user", uid))
    assert first == {"storyId": int(sid), "isCompleted": True}
    second = json.loads(_run(capsys, tmp_db_path, "toggle", "--story", sid))
    assert second["isCompleted"] is False

    csv_path = tmp_path / "out" / "stories.csv"
    out = _run(capsys, tmp_db_path, "list", "--user", uid, "--year", "2025", "--csv", str(csv_path))
    assert "Learn Rust" in out
    assert csv_path.exists()

    stats = json.loads(_run(capsys, tmp_db_path, "stats", "--user", uid, "--year", "2025"))
    assert stats["totalStories"] == 1
    assert stats["completedStories"] == 0
    assert stats["totalEstimatedHours"] == 12.5


def test_cli_error_exit_code(capsys, tmp_db_path):
    code = main(["--db", tmp_db_path, "add-story", "--user", str(uuid.uuid4()), "--title", "x", "--year", "2025"])
    err = capsys.readouterr().err
    assert code == 1
    assert "FOREIGN KEY" in err


def test_cli_init_new_file(capsys, tmp_path):
    db = str(tmp_path / "fresh.db")
    out = _run(capsys, db, "init")
    assert "fresh.db" in out
    out = _run(capsys, db, "list", "--user", str(uuid.uuid4()), "--year", "2025")
    assert "(empty)" in out
