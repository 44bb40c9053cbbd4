from __future__ import annotations

import re
from datetime import date, datetime

_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class InvalidDateError(ValueError):
    pass


class InvalidMonthError(ValueError):
    pass


def parse_iso_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    candidate = (value or "").strip()
    try:
        parsed = datetime.strptime(candidate, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateError(f"Dates must look like YYYY-MM-DD, got {value!r}.") from exc

    # strptime accepts "2024-3-1"; the session key must stay canonical.
    if parsed.isoformat() != candidate:
        raise InvalidDateError(f"Dates must look like YYYY-MM-DD, got {value!r}.")
    return parsed


def normalize_date(value: str | date) -> str:
    return parse_iso_date(value).isoformat()


def local_today() -> str:
    """Today's date on the local clock, never shifted to UTC."""

    return date.today().isoformat()


def current_month(today: date | None = None) -> str:
    reference = today or date.today()
    return reference.strftime("%Y-%m")


def parse_month(value: str) -> str:
    candidate = (value or "").strip()
    if not _MONTH_PATTERN.match(candidate):
        raise InvalidMonthError(f"Months must look like YYYY-MM, got {value!r}.")
    return candidate
