from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from roster_attendance.models import TIME_SLOTS, Member, Session
from roster_attendance.utils import parse_month


@dataclass(slots=True)
class MemberStats:
    member_id: str
    name: str
    slot_counts: dict[str, int]
    total: int
    rate: int


@dataclass(slots=True)
class DailyDetail:
    date: str
    names_by_slot: dict[str, list[str]]
    counts_by_slot: dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.counts_by_slot.values())


@dataclass(slots=True)
class MonthlyStatistics:
    month: str
    slots: tuple[str, ...]
    session_count: int
    members: list[MemberStats] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
    daily: list[DailyDetail] = field(default_factory=list)


def monthly_sessions(sessions: Iterable[Session], month: str) -> list[Session]:
    prefix = f"{parse_month(month)}-"
    return [session for session in sessions if session.date.startswith(prefix)]


def monthly_statistics(
    members: Sequence[Member],
    sessions: Mapping[str, Session] | Iterable[Session],
    month: str,
    *,
    slots: Sequence[str] = TIME_SLOTS,
) -> MonthlyStatistics:
    """Project a month of attendance out of the roster and its sessions.

    Nothing is cached; call again whenever members or sessions change.
    """

    slots = tuple(slots)
    session_values = sessions.values() if isinstance(sessions, Mapping) else sessions
    # Sessions outside `slots` are left out of every figure.
    in_month = [session for session in monthly_sessions(session_values, month) if session.slot in slots]
    names = {member.id: member.name for member in members}

    member_stats: list[MemberStats] = []
    for member in members:
        slot_counts = dict.fromkeys(slots, 0)
        for session in in_month:
            if member.id in session.present_ids:
                slot_counts[session.slot] += 1
        total = sum(slot_counts.values())
        rate = round(total / len(in_month) * 100) if in_month else 0
        member_stats.append(
            MemberStats(member_id=member.id, name=member.name, slot_counts=slot_counts, total=total, rate=rate)
        )
    # sorted() is stable, so ties keep roster order.
    member_stats.sort(key=lambda stats: stats.total, reverse=True)

    summary = dict.fromkeys(slots, 0)
    for session in in_month:
        summary[session.slot] += len(session.present_ids)
    summary["total"] = sum(summary[slot] for slot in slots)

    by_date: dict[str, DailyDetail] = {}
    for session in in_month:
        if not session.present_ids:
            continue
        detail = by_date.setdefault(
            session.date,
            DailyDetail(
                date=session.date,
                names_by_slot={slot: [] for slot in slots},
                counts_by_slot=dict.fromkeys(slots, 0),
            ),
        )
        present_names = sorted(names[member_id] for member_id in session.present_ids if member_id in names)
        detail.names_by_slot[session.slot] = present_names
        detail.counts_by_slot[session.slot] = len(session.present_ids)

    daily = sorted(by_date.values(), key=lambda detail: detail.date, reverse=True)

    return MonthlyStatistics(
        month=month,
        slots=slots,
        session_count=len(in_month),
        members=member_stats,
        summary=summary,
        daily=daily,
    )
