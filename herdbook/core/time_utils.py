from __future__ import annotations

import calendar
from datetime import date, datetime

PRIMARY_DATE_FORMAT = "%Y-%m-%d"
DAYS_PER_MONTH = 30

_DATE_FORMAT_ERROR = "Invalid date format. Expected 'YYYY-MM-DD' (optionally followed by HH:mm[:ss])."


def _parse_date_components(cleaned: str) -> date:
    if len(cleaned) not in (10, 16, 19):
        raise ValueError(_DATE_FORMAT_ERROR)

    if cleaned[4] != "-" or cleaned[7] != "-":
        raise ValueError(_DATE_FORMAT_ERROR)
    if len(cleaned) > 10 and (
        cleaned[10] not in (" ", "T")
        or cleaned[13] != ":"
        or (len(cleaned) == 19 and cleaned[16] != ":")
    ):
        raise ValueError(_DATE_FORMAT_ERROR)

    try:
        year = int(cleaned[0:4])
        month = int(cleaned[5:7])
        day = int(cleaned[8:10])
        if len(cleaned) > 10:
            hour = int(cleaned[11:13])
            minute = int(cleaned[14:16])
            second = int(cleaned[17:19]) if len(cleaned) == 19 else 0
            # Time of day is validated, then dropped: records compare by calendar day.
            datetime(year, month, day, hour, minute, second)
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(_DATE_FORMAT_ERROR) from exc


def parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Date must be a non-empty string.")
    return _parse_date_components(value.strip())


def parse_optional_date(value: object) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value)


def format_date(value: date) -> str:
    return value.strftime(PRIMARY_DATE_FORMAT)


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def shift_months(value: date, months: int) -> date:
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_label(value: date) -> str:
    return calendar.month_abbr[value.month]


def whole_months_between(start: date, end: date) -> int:
    return max(1, (end - start).days // DAYS_PER_MONTH)


def in_range(value: date | None, start: date | None, end: date | None) -> bool:
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
