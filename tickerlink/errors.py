from __future__ import annotations

from pathlib import Path
from typing import Sequence

__all__ = [
    "TickerLinkError",
    "ArgumentError",
    "ConfigError",
    "UnsupportedInstrumentError",
    "AmbiguousYearError",
    "AmbiguousFormatError",
]


class TickerLinkError(ValueError):
    """Base exception for symbol mapping failures."""


class ArgumentError(TickerLinkError):
    """Raised for null, empty or malformed input."""


class ConfigError(TickerLinkError):
    """Raised when the symbol map file cannot be read or parsed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class UnsupportedInstrumentError(ArgumentError):
    """Raised when no grammar exists for the requested class, market or letter."""


class AmbiguousYearError(TickerLinkError):
    """Raised when year resolution exhausts its search horizon."""

    def __init__(self, root: str, year_digits: str, horizon: int) -> None:
        super().__init__(
            f"No contract year ending in '{year_digits}' for '{root}' within {horizon} years"
        )
        self.root = root
        self.year_digits = year_digits
        self.horizon = horizon


class AmbiguousFormatError(TickerLinkError):
    """Raised when a ticker matches zero or several grammars."""

    def __init__(self, ticker: str, candidates: Sequence[str] | None = None) -> None:
        unique = list(dict.fromkeys(candidates or []))
        if unique:
            message = f"Ticker '{ticker}' matches several formats: {', '.join(unique)}"
        else:
            message = f"Ticker '{ticker}' does not match any known format"
        super().__init__(message)
        self.ticker = ticker
        self.candidates = unique
