from __future__ import annotations


class RosterError(RuntimeError):
    """Base class for recoverable roster and attendance errors."""


class DuplicateNameError(RosterError):
    """Raised when a name is already registered in the roster."""

    def __init__(self, name: str) -> None:
        super().__init__(f"'{name}' is already on the roster.")
        self.name = name


class InvalidNameError(RosterError):
    """Raised when a member name is blank or too short."""


class MemberHasAttendanceError(RosterError):
    """Raised when deleting a member that some session still references."""

    def __init__(self, member_id: str, member_name: str) -> None:
        super().__init__(f"'{member_name}' has attendance records and cannot be deleted.")
        self.member_id = member_id
        self.member_name = member_name


class MemberNotFoundError(RosterError):
    """Raised when a write operation names a member id the roster does not know."""


class EmptyInputError(RosterError):
    """Raised when ingestion is asked to process blank text."""


class InvalidSlotError(RosterError):
    """Raised for a slot outside the configured time slots."""


class NothingToResetError(RosterError):
    """Raised when resetting a session that has no presence to clear."""


class QRCodeServiceError(RosterError):
    """Raised when the QR image service cannot be reached or answers with an error."""
