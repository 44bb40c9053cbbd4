from .roster import DEFAULT_MEMBER_GROUP, TIME_SLOTS, Member, Session, generate_member_id, session_key
from .schedule import WEEKDAY_LABELS, InvalidScheduleError, WeeklySchedule

__all__ = [
    "DEFAULT_MEMBER_GROUP",
    "TIME_SLOTS",
    "Member",
    "Session",
    "generate_member_id",
    "session_key",
    "WEEKDAY_LABELS",
    "InvalidScheduleError",
    "WeeklySchedule",
]
