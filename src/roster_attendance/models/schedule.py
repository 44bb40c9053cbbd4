from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping

from roster_attendance.models.roster import TIME_SLOTS


# date.weekday() index -> Korean label, Monday first.
WEEKDAY_LABELS = {
    0: "월요일",
    1: "화요일",
    2: "수요일",
    3: "목요일",
    4: "금요일",
    5: "토요일",
    6: "일요일",
}

_SHORT_LABELS = {label[0]: index for index, label in WEEKDAY_LABELS.items()}


class InvalidScheduleError(ValueError):
    pass


def _default_days() -> dict[int, tuple[str, ...]]:
    return {index: TIME_SLOTS for index in WEEKDAY_LABELS}


@dataclass(frozen=True)
class WeeklySchedule:
    """Which slots run on which day of the week."""

    days: Mapping[int, tuple[str, ...]] = field(default_factory=_default_days)

    def slots_for(self, day: date) -> tuple[str, ...]:
        return tuple(self.days.get(day.weekday(), ()))

    def is_open(self, day: date, slot: str) -> bool:
        return slot in self.slots_for(day)

    def weekday_label(self, day: date) -> str:
        return WEEKDAY_LABELS[day.weekday()]

    @classmethod
    def parse(cls, raw: str | None) -> "WeeklySchedule":
        """Build a schedule from ``월=오전,오후;화=저녁``.

        Days that are not mentioned keep every slot. An empty slot list
        (``일=``) closes the day.
        """

        days = _default_days()
        if not raw or not raw.strip():
            return cls(days)

        for chunk in raw.split(";"):
            chunk = chunk.strip()
            if not chunk:
                continue
            if "=" not in chunk:
                raise InvalidScheduleError(f"Schedule entry {chunk!r} must look like '월=오전,오후'.")
            day_part, slots_part = (part.strip() for part in chunk.split("=", 1))
            index = _SHORT_LABELS.get(day_part[:1]) if day_part else None
            if index is None:
                raise InvalidScheduleError(f"Unknown weekday {day_part!r}.")
            slots = tuple(slot.strip() for slot in slots_part.split(",") if slot.strip())
            unknown = [slot for slot in slots if slot not in TIME_SLOTS]
            if unknown:
                raise InvalidScheduleError(f"Unknown slot(s): {', '.join(unknown)}")
            days[index] = slots

        return cls(days)
