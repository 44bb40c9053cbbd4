from __future__ import annotations

import pytest

from roster_attendance.main import main
from roster_attendance.services import build_check_in_url


@pytest.fixture
def cli(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("APP_SETTINGS_DIR", str(tmp_path / "settings"))
    for key in ("DATABASE_PATH", "CHECKIN_BASE_URL", "DEFAULT_SLOT", "WEEKLY_SCHEDULE"):
        monkeypatch.delenv(key, raising=False)
    database = str(tmp_path / "attendance.db")

    def run(*argv, roster="3반"):
        prefix = ["--roster", roster] if roster is not None else []
        code = main([*prefix, "--database", database, *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return run


def test_ingest_then_stats(cli):
    code, out, _ = cli("ingest", "김민수 이영희 출석 확인", "--date", "2024-03-01", "--slot", "오전")
    assert code == 0
    assert "Registered: 김민수, 이영희" in out
    assert "2 newly marked present" in out

    code, out, _ = cli("stats", "--month", "2024-03")
    assert code == 0
    assert "오전 2  오후 0  저녁 0  total 2" in out
    assert "2024-03-01" in out


def test_remove_requires_confirmation_and_no_attendance(cli):
    cli("ingest", "김민수", "--date", "2024-03-01", "--slot", "오전")

    code, _, err = cli("remove", "김민수")
    assert code == 1
    assert "--yes" in err

    code, _, err = cli("remove", "김민수", "--yes")
    assert code == 1
    assert "cannot be deleted" in err

    assert cli("reset", "--date", "2024-03-01", "--slot", "오전", "--yes")[0] == 0
    code, out, _ = cli("remove", "김민수", "--yes")
    assert code == 0
    assert "Deleted 김민수." in out


def test_self_check_in_flow(cli):
    code, out, _ = cli("register", "최민호", "--slot", "저녁")
    assert code == 0
    assert "registered and checked in" in out

    code, out, _ = cli("check-in", "최민호", "--slot", "저녁")
    assert "already checked in" in out

    code, out, _ = cli("check-in", "최민호", "--slot", "저녁", "--cancel")
    assert "cancelled" in out


def test_duplicate_add_is_reported(cli):
    assert cli("add", "김민수")[0] == 0
    code, _, err = cli("add", "김민수")
    assert code == 1
    assert "already on the roster" in err


def test_link_uses_stored_base_url(cli):
    code, _, err = cli("link", "--day", "월요일", "--slot", "오전")
    assert code == 1
    assert "base URL" in err

    assert cli("config", "--base-url", "https://attendance.example.com/")[0] == 0
    code, out, _ = cli("link", "--day", "월요일", "--slot", "오전")
    assert code == 0
    assert out.splitlines()[0].startswith("https://attendance.example.com?mode=member&classId=")


def test_shared_link_supplies_roster_and_slot(cli):
    link = build_check_in_url("https://attendance.example.com", "3반", "월요일", "저녁")

    code, out, _ = cli("register", "최민호", "--link", link, roster=None)
    assert code == 0
    assert "checked in" in out and "저녁" in out

    code, out, _ = cli("check-in", "최민호", "--link", link, roster=None)
    assert code == 0
    assert "already checked in" in out

    code, out, _ = cli("members")
    assert "최민호" in out


def test_shared_link_for_another_roster_is_refused(cli):
    link = build_check_in_url("https://attendance.example.com", "4반", "월요일", "오전")

    code, _, err = cli("register", "최민호", "--link", link)
    assert code == 1
    assert "4반" in err

    code, out, _ = cli("members")
    assert out == ""


def test_check_in_needs_a_slot_or_link(cli):
    cli("add", "최민호")

    code, _, err = cli("check-in", "최민호")
    assert code == 1
    assert "--link" in err

    code, _, err = cli("check-in", "최민호", "--link", "https://attendance.example.com?mode=member")
    assert code == 1
    assert "missing" in err
