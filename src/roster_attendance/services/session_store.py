from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from roster_attendance.data import RosterRepository
from roster_attendance.models import TIME_SLOTS, Session, session_key
from roster_attendance.services.errors import InvalidSlotError
from roster_attendance.utils import normalize_date


class SessionStore:
    """Attendance sessions of one roster keyed by (date, slot).

    Writes replace the whole presence set. Merging is the caller's decision.
    """

    def __init__(
        self,
        repository: RosterRepository,
        roster_id: str,
        *,
        slots: Sequence[str] = TIME_SLOTS,
    ) -> None:
        self._repository = repository
        self.roster_id = roster_id
        self.slots = tuple(slots)

    def _key(self, day: str | date, slot: str) -> tuple[str, str]:
        if slot not in self.slots:
            raise InvalidSlotError(f"Unknown slot {slot!r}; expected one of {', '.join(self.slots)}.")
        return normalize_date(day), slot

    def sessions(self) -> dict[str, Session]:
        return self._repository.read_sessions(self.roster_id)

    def get_session(self, day: str | date, slot: str) -> Optional[Session]:
        iso_day, slot = self._key(day, slot)
        return self.sessions().get(session_key(iso_day, slot))

    def get_presence(self, day: str | date, slot: str) -> frozenset[str]:
        session = self.get_session(day, slot)
        return session.present_ids if session else frozenset()

    def set_presence(self, day: str | date, slot: str, ids: Iterable[str]) -> Session:
        iso_day, slot = self._key(day, slot)
        session = Session(date=iso_day, slot=slot, present_ids=frozenset(ids))
        self._repository.write_session(self.roster_id, session)
        return session

    def reset_presence(self, day: str | date, slot: str) -> Session:
        return self.set_presence(day, slot, ())
