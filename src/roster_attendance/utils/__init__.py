from .time import (
    InvalidDateError,
    InvalidMonthError,
    current_month,
    local_today,
    normalize_date,
    parse_iso_date,
    parse_month,
)

__all__ = [
    "InvalidDateError",
    "InvalidMonthError",
    "current_month",
    "local_today",
    "normalize_date",
    "parse_iso_date",
    "parse_month",
]
