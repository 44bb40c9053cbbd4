from __future__ import annotations

import pytest

from roster_attendance.data import Database, SQLiteRosterRepository
from roster_attendance.services import (
    DuplicateNameError,
    InvalidNameError,
    MemberHasAttendanceError,
    RosterStore,
    SessionStore,
)


def _stores(tmp_path, roster_id="3반"):
    repository = SQLiteRosterRepository(Database(tmp_path / "attendance.db"))
    repository.initialize()
    return RosterStore(repository, roster_id), SessionStore(repository, roster_id)


def test_add_member_rejects_duplicates_without_changing_roster(tmp_path):
    roster, _ = _stores(tmp_path)

    first = roster.add_member("김민수")
    roster.add_member("이영희")

    with pytest.raises(DuplicateNameError):
        roster.add_member(" 김민수 ")

    members = roster.members()
    assert [member.name for member in members] == ["김민수", "이영희"]
    assert roster.find_by_name("김민수").id == first.id


def test_add_member_rejects_blank_names(tmp_path):
    roster, _ = _stores(tmp_path)

    with pytest.raises(InvalidNameError):
        roster.add_member("   ")
    assert roster.members() == []


def test_members_sorted_in_hangul_order(tmp_path):
    roster, _ = _stores(tmp_path)
    for name in ("홍길동", "강감찬", "이순신"):
        roster.add_member(name)

    assert [member.name for member in roster.members()] == ["강감찬", "이순신", "홍길동"]


def test_lookups_return_none_when_absent(tmp_path):
    roster, _ = _stores(tmp_path)

    assert roster.find_by_name("없는사람") is None
    assert roster.find_by_id("m_missing") is None


def test_remove_member_blocked_by_any_historical_session(tmp_path):
    roster, sessions = _stores(tmp_path)
    member = roster.add_member("김민수")
    sessions.set_presence("2023-01-05", "저녁", {member.id})
    sessions.set_presence("2024-03-01", "오전", set())

    with pytest.raises(MemberHasAttendanceError) as excinfo:
        roster.remove_member(member.id)

    assert excinfo.value.member_name == "김민수"
    assert roster.find_by_id(member.id) is not None

    sessions.reset_presence("2023-01-05", "저녁")
    roster.remove_member(member.id)

    assert roster.find_by_id(member.id) is None


def test_rosters_are_isolated(tmp_path):
    roster_a, _ = _stores(tmp_path, "3반")
    roster_b, _ = _stores(tmp_path, "4반")

    roster_a.add_member("김민수")
    roster_b.add_member("김민수")

    assert len(roster_a.members()) == 1
    assert roster_a.members()[0].id != roster_b.members()[0].id


def test_rosters_with_similar_ids_stay_separate(tmp_path):
    roster_dash, sessions_dash = _stores(tmp_path, "3-반")
    roster_dash.add_member("김민수")
    sessions_dash.set_presence("2024-03-01", "오전", [roster_dash.members()[0].id])

    for roster_id in ("3_반", "3.반", "3 반"):
        roster, sessions = _stores(tmp_path, roster_id)
        assert roster.members() == []
        assert sessions.sessions() == {}
        roster.add_member("김민수")

    assert len(roster_dash.members()) == 1


def test_surrounding_whitespace_names_the_same_roster(tmp_path):
    roster, _ = _stores(tmp_path, " 3반 ")
    roster.add_member("김민수")

    same, _ = _stores(tmp_path, "3반")
    assert [member.name for member in same.members()] == ["김민수"]
