from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Optional

from roster_attendance.data import roster_key
from roster_attendance.models import Member
from roster_attendance.services.errors import (
    EmptyInputError,
    InvalidNameError,
    MemberNotFoundError,
    NothingToResetError,
)
from roster_attendance.services.name_extractor import extract_names
from roster_attendance.services.roster_store import RosterStore
from roster_attendance.services.session_store import SessionStore
from roster_attendance.utils import local_today, normalize_date

logger = logging.getLogger(__name__)

MIN_SELF_REGISTRATION_LENGTH = 2
_WHITESPACE = re.compile(r"\s+")


class CheckInStatus(str, Enum):
    CHECKED_IN = "checked_in"
    ALREADY_PRESENT = "already_present"
    CANCELLED = "cancelled"
    NOT_PRESENT = "not_present"


@dataclass(slots=True)
class IngestResult:
    date: str
    slot: str
    registered: list[Member] = field(default_factory=list)
    matched_ids: frozenset[str] = frozenset()
    newly_present_ids: frozenset[str] = frozenset()
    present_ids: frozenset[str] = frozenset()

    @property
    def newly_present_count(self) -> int:
        return len(self.newly_present_ids)

    def summary(self) -> str:
        return (
            f"{self.date} {self.slot}: {len(self.matched_ids)} matched, "
            f"{self.newly_present_count} newly present, {len(self.registered)} registered"
        )


@dataclass(slots=True)
class CheckInResult:
    status: CheckInStatus
    member: Member
    date: str
    slot: str

    @property
    def changed(self) -> bool:
        return self.status in (CheckInStatus.CHECKED_IN, CheckInStatus.CANCELLED)


class ReconciliationService:
    """Every write path into a roster's attendance goes through here.

    Presence is always re-read from the store right before it is changed so
    that updates pushed by another client since the last read are kept.

    Self check-in of someone already present never removes them: the call
    reports ``ALREADY_PRESENT`` and the display asks whether to cancel,
    then calls :meth:`cancel_check_in`.
    """

    def __init__(
        self,
        roster: RosterStore,
        sessions: SessionStore,
        *,
        today: Callable[[], str] = local_today,
    ) -> None:
        if roster_key(roster.roster_id) != roster_key(sessions.roster_id):
            raise ValueError("Roster and session stores must belong to the same roster.")
        self._roster = roster
        self._sessions = sessions
        self._today = today

    @property
    def roster_id(self) -> str:
        return self._roster.roster_id

    def ingest(self, text: str, day: str | date, slot: str) -> IngestResult:
        if not text or not text.strip():
            raise EmptyInputError("Nothing to ingest: the pasted text is empty.")
        iso_day = normalize_date(day)
        # Validate the slot before registering anyone.
        self._sessions.get_presence(iso_day, slot)

        registered: list[Member] = []
        for name in extract_names(text):
            if self._roster.find_by_name(name) is None:
                registered.append(self._roster.add_member(name))

        compact = _WHITESPACE.sub("", text)
        matched = frozenset(member.id for member in self._roster.members() if member.name in compact)

        existing = self._sessions.get_presence(iso_day, slot)
        merged = existing | matched
        self._sessions.set_presence(iso_day, slot, merged)

        result = IngestResult(
            date=iso_day,
            slot=slot,
            registered=registered,
            matched_ids=matched,
            newly_present_ids=matched - existing,
            present_ids=merged,
        )
        logger.info("Ingested text into %s: %s", self.roster_id, result.summary())
        return result

    def self_check_in(self, member_id: str, slot: str, day: Optional[str | date] = None) -> CheckInResult:
        member = self._require_member(member_id)
        iso_day = normalize_date(day) if day is not None else self._today()

        current = self._sessions.get_presence(iso_day, slot)
        if member_id in current:
            logger.info("%s is already present for %s %s", member.name, iso_day, slot)
            return CheckInResult(CheckInStatus.ALREADY_PRESENT, member, iso_day, slot)

        self._sessions.set_presence(iso_day, slot, current | {member_id})
        logger.info("%s checked in for %s %s", member.name, iso_day, slot)
        return CheckInResult(CheckInStatus.CHECKED_IN, member, iso_day, slot)

    def cancel_check_in(self, member_id: str, slot: str, day: Optional[str | date] = None) -> CheckInResult:
        member = self._require_member(member_id)
        iso_day = normalize_date(day) if day is not None else self._today()

        current = self._sessions.get_presence(iso_day, slot)
        if member_id not in current:
            return CheckInResult(CheckInStatus.NOT_PRESENT, member, iso_day, slot)

        self._sessions.set_presence(iso_day, slot, current - {member_id})
        logger.info("%s cancelled check-in for %s %s", member.name, iso_day, slot)
        return CheckInResult(CheckInStatus.CANCELLED, member, iso_day, slot)

    def register_and_check_in(self, name: str, slot: str) -> CheckInResult:
        """Self-registration: add a newcomer and mark them present today."""

        cleaned = (name or "").strip()
        if len(cleaned) < MIN_SELF_REGISTRATION_LENGTH:
            raise InvalidNameError("Please enter your full name.")
        # Fail on a bad slot before the member is created.
        self._sessions.get_presence(self._today(), slot)

        member = self._roster.add_member(cleaned)
        return self.self_check_in(member.id, slot)

    def toggle_presence(self, member_id: str, day: str | date, slot: str) -> bool:
        """Admin grid toggle. Returns whether the member is now present."""

        self._require_member(member_id)
        current = self._sessions.get_presence(day, slot)
        if member_id in current:
            self._sessions.set_presence(day, slot, current - {member_id})
            return False
        self._sessions.set_presence(day, slot, current | {member_id})
        return True

    def reset_session(self, day: str | date, slot: str) -> int:
        cleared = len(self._sessions.get_presence(day, slot))
        if not cleared:
            raise NothingToResetError("There is no attendance to clear for this session.")
        self._sessions.reset_presence(day, slot)
        logger.info("Reset %s %s in %s (%d cleared)", normalize_date(day), slot, self.roster_id, cleared)
        return cleared

    def _require_member(self, member_id: str) -> Member:
        member = self._roster.find_by_id(member_id)
        if member is None:
            raise MemberNotFoundError(f"No member with id {member_id!r} in roster {self.roster_id!r}.")
        return member
