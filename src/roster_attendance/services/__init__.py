from .errors import (
    DuplicateNameError,
    EmptyInputError,
    InvalidNameError,
    InvalidSlotError,
    MemberHasAttendanceError,
    MemberNotFoundError,
    NothingToResetError,
    QRCodeServiceError,
    RosterError,
)
from .name_extractor import EXCLUDED_WORDS, extract_names
from .reconciliation import CheckInResult, CheckInStatus, IngestResult, ReconciliationService
from .roster_store import RosterStore
from .session_store import SessionStore
from .share_links import CheckInContext, QRCodeClient, build_check_in_url, parse_check_in_url, qr_image_url
from .statistics import DailyDetail, MemberStats, MonthlyStatistics, monthly_statistics

__all__ = [
    "RosterError",
    "DuplicateNameError",
    "EmptyInputError",
    "InvalidNameError",
    "InvalidSlotError",
    "MemberHasAttendanceError",
    "MemberNotFoundError",
    "NothingToResetError",
    "QRCodeServiceError",
    "EXCLUDED_WORDS",
    "extract_names",
    "CheckInResult",
    "CheckInStatus",
    "IngestResult",
    "ReconciliationService",
    "RosterStore",
    "SessionStore",
    "CheckInContext",
    "QRCodeClient",
    "build_check_in_url",
    "parse_check_in_url",
    "qr_image_url",
    "DailyDetail",
    "MemberStats",
    "MonthlyStatistics",
    "monthly_statistics",
]
