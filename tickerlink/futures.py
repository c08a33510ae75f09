"""Futures month codes and contract-year resolution.

Terminal tickers carry the delivery month as a letter and the year as one or
two trailing digits (``CLH0``, ``CLH28``). Two digits are resolved with a
pivot around the reference date; a single digit is resolved to the earliest
year, stepping forward a decade at a time, that is not already in the past.
"""
from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Dict, Optional

from tickerlink.errors import AmbiguousYearError, ArgumentError, UnsupportedInstrumentError
from tickerlink.types import MONTH_LETTERS, MappingInfo

__all__ = ["FutureCodeResolver", "DEFAULT_YEAR_HORIZON", "PIVOT_SPAN"]

logger = logging.getLogger(__name__)

DEFAULT_YEAR_HORIZON = 20
# Two-digit years land within (as_of - PIVOT_SPAN, as_of + PIVOT_SPAN].
PIVOT_SPAN = 50

_LETTER_TO_MONTH: Dict[str, int] = {letter: index + 1 for index, letter in enumerate(MONTH_LETTERS)}


class FutureCodeResolver:
    """Month-letter table and year disambiguation for futures tickers."""

    def __init__(self, horizon_years: int = DEFAULT_YEAR_HORIZON) -> None:
        if horizon_years <= 0:
            raise ArgumentError("horizon_years must be positive")
        self.horizon_years = horizon_years

    @staticmethod
    def month_letter_for(month: int) -> str:
        if not isinstance(month, int) or not 1 <= month <= 12:
            raise UnsupportedInstrumentError(f"No futures month code for month {month!r}")
        return MONTH_LETTERS[month - 1]

    @staticmethod
    def month_for_letter(letter: str) -> int:
        token = (letter or "").strip().upper()
        try:
            return _LETTER_TO_MONTH[token]
        except KeyError as exc:
            raise UnsupportedInstrumentError(f"Unknown futures month code: {letter!r}") from exc

    @staticmethod
    def is_month_letter(letter: str) -> bool:
        return letter.upper() in _LETTER_TO_MONTH

    def resolve_year(self, root: str, month_letter: str, year_digits: str, as_of: date) -> int:
        """Resolve the contract year encoded by *year_digits*."""

        self.month_for_letter(month_letter)
        digits = str(year_digits).strip()
        if not digits.isdigit() or len(digits) not in (1, 2):
            raise ArgumentError(f"Year code for '{root}' must be one or two digits, got {year_digits!r}")

        if len(digits) == 2:
            return self.resolve_two_digit_year(int(digits), as_of)

        last = int(digits)
        earliest = as_of.year - self.horizon_years
        latest = as_of.year + self.horizon_years
        candidate = as_of.year - as_of.year % 10 + last
        while candidate <= latest:
            if candidate >= as_of.year and candidate >= earliest:
                logger.debug(
                    "year_resolved root=%s code=%s%s year=%d as_of=%s",
                    root,
                    month_letter,
                    digits,
                    candidate,
                    as_of.isoformat(),
                )
                return candidate
            candidate += 10
        raise AmbiguousYearError(root, digits, self.horizon_years)

    @staticmethod
    def resolve_two_digit_year(short_year: int, as_of: date) -> int:
        """Place a two-digit year in the century window around *as_of*."""

        year = as_of.year - as_of.year % 100 + short_year
        if year > as_of.year + PIVOT_SPAN:
            year -= 100
        elif year <= as_of.year - PIVOT_SPAN:
            year += 100
        return year

    def year_digits_for(
        self, year: int, as_of: date, root: str = "", *, min_digits: int = 1
    ) -> str:
        """Return the shortest year code of at least *min_digits* that resolves back to *year*."""

        for digits in (str(year % 10), f"{year % 100:02d}"):
            if len(digits) < min_digits:
                continue
            try:
                resolved = self.resolve_year(root, "F", digits, as_of)
            except AmbiguousYearError:
                continue
            if resolved == year:
                return digits
        raise ArgumentError(
            f"Contract year {year} for '{root}' is outside the two-digit window around {as_of.year}"
        )

    @staticmethod
    def expiry_day(info: Optional[MappingInfo], month_letter: str, year: int) -> int:
        """Day-of-month of the contract's expiry from the per-root table."""

        if info is None or not info.expiry_days:
            return 1
        letter = month_letter.upper()
        for key in (f"{letter}{year % 100:02d}", f"{letter}{year % 10}", letter, "*"):
            day = info.expiry_days.get(key)
            if day is not None:
                return day
        return 1

    def contract_expiry(self, info: Optional[MappingInfo], month_letter: str, year: int) -> date:
        month = self.month_for_letter(month_letter)
        day = self.expiry_day(info, month_letter, year)
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(day, last_day))
