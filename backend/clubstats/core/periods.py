from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from clubstats.core.errors import ValidationError

ALL = "all"

PeriodValue = Union[int, str]


@dataclass(frozen=True)
class Period:
    """Inclusive date window over game dates. start/end are None when unbounded."""

    year: Optional[int]
    month: Optional[int]
    start: Optional[date]
    end: Optional[date]

    @property
    def is_bounded(self) -> bool:
        return self.start is not None

    def contains(self, d: date) -> bool:
        if not self.is_bounded:
            return True
        return self.start <= d <= self.end

    def reference_date(self, today: Optional[date] = None) -> date:
        # last day of the window, or "now" when the period is "all"
        if self.end is not None:
            return self.end
        return today or date.today()


def _parse_int(value: PeriodValue, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("", ALL):
            return None
        try:
            return int(v)
        except ValueError:
            raise ValidationError(f"Invalid {what}: {value!r}")
    return int(value)


def parse_period(year: PeriodValue = ALL, month: PeriodValue = ALL) -> Period:
    y = _parse_int(year, "year")
    m = _parse_int(month, "month")

    if y is None:
        # month without a year means nothing; treat the whole log
        return Period(year=None, month=None, start=None, end=None)

    if y < 1900 or y > 9999:
        raise ValidationError(f"Invalid year: {year!r}")

    if m is None:
        return Period(year=y, month=None, start=date(y, 1, 1), end=date(y, 12, 31))

    if m < 1 or m > 12:
        raise ValidationError(f"Invalid month: {month!r}")

    start = date(y, m, 1)
    end = start + relativedelta(months=1, days=-1)
    return Period(year=y, month=m, start=start, end=end)


def year_window(year: PeriodValue = ALL, today: Optional[date] = None) -> Period:
    """Calendar year window; "all" means the current year."""
    y = _parse_int(year, "year")
    if y is None:
        y = (today or date.today()).year
    return parse_period(y, ALL)


def round_half_up(value, digits: int = 0) -> Decimal:
    """Round like a calculator (0.5 -> 1), not banker's rounding."""
    if isinstance(value, Fraction):
        d = Decimal(value.numerator) / Decimal(value.denominator)
    else:
        d = Decimal(str(value))
    q = Decimal(1).scaleb(-digits)
    return d.quantize(q, rounding=ROUND_HALF_UP)


def round_int(value) -> int:
    return int(round_half_up(value, 0))


def percent_label(part: int, whole: int) -> str:
    if whole <= 0:
        return "0%"
    return f"{round_int(Fraction(part * 100, whole))}%"


def days_between(later: date, earlier: date) -> int:
    return (later - earlier).days
