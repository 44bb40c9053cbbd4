from __future__ import annotations

import logging
import unicodedata
from typing import Optional

from roster_attendance.data import RosterRepository
from roster_attendance.models import Member
from roster_attendance.services.errors import DuplicateNameError, InvalidNameError, MemberHasAttendanceError

logger = logging.getLogger(__name__)


def _collation_key(member: Member) -> tuple[str, str]:
    # Precomposed Hangul syllables are laid out in dictionary order.
    return unicodedata.normalize("NFC", member.name), member.id


class RosterStore:
    """Members of one roster, read through to the repository on every call."""

    def __init__(self, repository: RosterRepository, roster_id: str) -> None:
        self._repository = repository
        self.roster_id = roster_id

    def members(self) -> list[Member]:
        return sorted(self._repository.read_members(self.roster_id), key=_collation_key)

    def find_by_name(self, name: str) -> Optional[Member]:
        target = (name or "").strip()
        return next((member for member in self.members() if member.name == target), None)

    def find_by_id(self, member_id: str) -> Optional[Member]:
        return next((member for member in self.members() if member.id == member_id), None)

    def add_member(self, name: str) -> Member:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidNameError("Member names cannot be blank.")
        if self.find_by_name(cleaned):
            raise DuplicateNameError(cleaned)

        member = Member.create(cleaned)
        self._repository.write_member(self.roster_id, member)
        logger.info("Registered %s (%s) in roster %s", member.name, member.id, self.roster_id)
        return member

    def remove_member(self, member_id: str) -> None:
        member = self.find_by_id(member_id)
        if member is None:
            return

        sessions = self._repository.read_sessions(self.roster_id)
        if any(member_id in session.present_ids for session in sessions.values()):
            logger.warning("Refused to delete %s from roster %s: attendance exists", member.name, self.roster_id)
            raise MemberHasAttendanceError(member_id, member.name)

        self._repository.delete_member(self.roster_id, member_id)
        logger.info("Deleted %s (%s) from roster %s", member.name, member_id, self.roster_id)
