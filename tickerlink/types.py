"""Shared value types for the symbol mapper.

:class:`Instrument` is the internal identifier handed to the trading engine,
:class:`MappingInfo` is one per-root record from the symbol map file. Both are
frozen so a loaded table and every parsed instrument can be shared across
threads without copying.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from tickerlink.errors import ArgumentError

__all__ = [
    "SecurityType",
    "OptionRight",
    "Market",
    "Instrument",
    "MappingInfo",
    "MONTH_LETTERS",
    "STRIKE_STEP",
]

# Delivery month codes, January first.
MONTH_LETTERS: Tuple[str, ...] = ("F", "G", "H", "J", "K", "M", "N", "Q", "U", "V", "X", "Z")

STRIKE_STEP = Decimal("0.01")


class SecurityType(str, Enum):
    """Instrument classes known to the engine."""

    EQUITY = "equity"
    FOREX = "forex"
    FUTURE = "future"
    OPTION = "option"
    CFD = "cfd"
    INDEX = "index"

    @classmethod
    def parse(cls, value: "SecurityType | str") -> "SecurityType":
        """Resolve a security type from its name, case-insensitively."""

        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise ArgumentError(f"Unknown security type: {value!r}")


class OptionRight(str, Enum):
    """Option exercise right."""

    CALL = "call"
    PUT = "put"

    @property
    def code(self) -> str:
        return "C" if self is OptionRight.CALL else "P"

    @classmethod
    def from_code(cls, code: str) -> "OptionRight":
        token = code.strip().upper()
        if token == "C":
            return cls.CALL
        if token == "P":
            return cls.PUT
        raise ArgumentError(f"Unknown option right code: {code!r}")


class Market:
    """Market identifiers used by the engine."""

    USA = "usa"
    FXCM = "fxcm"
    OANDA = "oanda"
    CBOT = "cbot"
    CME = "cme"
    NYMEX = "nymex"
    COMEX = "comex"
    ICE = "ice"


def _quantize_strike(value: Decimal | int | float | str) -> Decimal:
    try:
        strike = Decimal(str(value))
    except ArithmeticError as exc:
        raise ArgumentError(f"Invalid strike: {value!r}") from exc
    if not strike.is_finite():
        raise ArgumentError(f"Invalid strike: {value!r}")
    return strike.quantize(STRIKE_STEP, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Instrument:
    """Internal instrument identifier.

    ``expiry`` is set only for dated futures and options; canonical futures
    (chain placeholders) never carry an expiry, right or strike.
    """

    root: str
    security_type: SecurityType
    market: str
    underlying: Optional[str] = None
    expiry: Optional[date] = None
    right: Optional[OptionRight] = None
    strike: Optional[Decimal] = None
    is_canonical: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "security_type", SecurityType.parse(self.security_type))
        if self.strike is not None:
            object.__setattr__(self, "strike", _quantize_strike(self.strike))

        kind = self.security_type
        if self.is_canonical:
            if kind is not SecurityType.FUTURE:
                raise ArgumentError(f"Only futures have canonical chain symbols, got {kind.value}")
            if self.expiry is not None or self.right is not None or self.strike is not None:
                raise ArgumentError("Canonical futures cannot carry expiry, right or strike")
            return

        if kind is SecurityType.OPTION:
            if self.expiry is None or self.right is None or self.strike is None:
                raise ArgumentError("Options require expiry, right and strike")
            if not self.underlying:
                raise ArgumentError("Options require an underlying")
            return

        if self.right is not None or self.strike is not None:
            raise ArgumentError(f"Right and strike are only valid for options, got {kind.value}")
        if kind is SecurityType.FUTURE:
            if self.expiry is None:
                raise ArgumentError("Dated futures require an expiry")
        elif self.expiry is not None:
            raise ArgumentError(f"Expiry is not valid for {kind.value}")

    @classmethod
    def equity(cls, root: str, market: str = Market.USA) -> "Instrument":
        return cls(root=root, security_type=SecurityType.EQUITY, market=market)

    @classmethod
    def forex(cls, pair: str, market: str = Market.FXCM) -> "Instrument":
        return cls(root=pair, security_type=SecurityType.FOREX, market=market)

    @classmethod
    def canonical_future(cls, root: str, market: str) -> "Instrument":
        return cls(
            root=root,
            security_type=SecurityType.FUTURE,
            market=market,
            underlying=root,
            is_canonical=True,
        )

    @classmethod
    def future(cls, root: str, market: str, expiry: date) -> "Instrument":
        return cls(
            root=root,
            security_type=SecurityType.FUTURE,
            market=market,
            underlying=root,
            expiry=expiry,
        )

    @classmethod
    def option(
        cls,
        underlying: str,
        market: str,
        right: OptionRight,
        strike: Decimal | int | float | str,
        expiry: date,
    ) -> "Instrument":
        return cls(
            root=underlying,
            security_type=SecurityType.OPTION,
            market=market,
            underlying=underlying,
            expiry=expiry,
            right=right,
            strike=_quantize_strike(strike),
        )

    @property
    def value(self) -> str:
        """Render the instrument the way the engine displays it."""

        if self.is_canonical:
            return f"/{self.root}"
        if self.security_type is SecurityType.FUTURE and self.expiry is not None:
            letter = MONTH_LETTERS[self.expiry.month - 1]
            return f"{self.root}{self.expiry.day:02d}{letter}{self.expiry.year % 100:02d}"
        if self.security_type is SecurityType.OPTION and self.expiry is not None:
            assert self.right is not None and self.strike is not None
            scaled = int(self.strike * 1000)
            return f"{self.underlying} {self.expiry:%y%m%d}{self.right.code}{scaled:08d}"
        return self.root

    def significant_fields(self) -> Tuple[object, ...]:
        return (self.root, self.security_type, self.market, self.expiry, self.right, self.strike)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MappingInfo:
    """Per-root record from the symbol map file."""

    root: str
    underlying: str
    security_type: SecurityType
    market: str
    alias: Optional[str] = None
    ticker_suffix: Optional[str] = None
    root_lookup_suffix: Optional[str] = None
    chain: Tuple[str, ...] = ()
    quote_currency: Optional[str] = None
    expiry_days: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def vendor_root(self) -> str:
        """Root string used on the terminal side."""

        return self.alias or self.root

    @property
    def suffix_tokens(self) -> Tuple[str, ...]:
        return tuple((self.ticker_suffix or "").split())

    # Explicit so the generated hash does not trip over the mapping proxy.
    def __hash__(self) -> int:
        return hash(
            (
                self.root,
                self.underlying,
                self.security_type,
                self.market,
                self.alias,
                self.ticker_suffix,
                self.root_lookup_suffix,
                self.chain,
                self.quote_currency,
                tuple(sorted(self.expiry_days.items())),
            )
        )
