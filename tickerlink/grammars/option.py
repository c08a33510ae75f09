"""Listed option tickers: ``SPY UO 12/31/19 C 200.00 Equity``.

The right and strike may also be written together (``C200.00``).
"""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

from tickerlink.errors import ArgumentError, UnsupportedInstrumentError
from tickerlink.grammars.base import Grammar, GrammarContext, MatchStrength, Tokens
from tickerlink.types import Instrument, Market, OptionRight, SecurityType

__all__ = ["OPTION", "VENUE_CODES", "MARKET_VENUE_CODES"]

CLASS_SUFFIXES = ("Equity", "Index")

VENUE_CODES: Dict[str, str] = {"UO": Market.USA}
MARKET_VENUE_CODES: Dict[str, str] = {Market.USA: "UO"}

_EXPIRY = re.compile(r"^(?P<month>\d{2})/(?P<day>\d{2})/(?P<year>\d{2})$")
_STRIKE = re.compile(r"^\d+(?:\.\d+)?$")
_RIGHT_AND_STRIKE = re.compile(r"^(?P<right>[CP])(?P<strike>\d+(?:\.\d+)?)$")


def _right_and_strike(tokens: Tokens) -> Optional[Tuple[str, str]]:
    if len(tokens) == 6:
        right, strike = tokens[3].upper(), tokens[4]
        if right in ("C", "P") and _STRIKE.match(strike):
            return right, strike
        return None
    found = _RIGHT_AND_STRIKE.match(tokens[3].upper())
    if found is None:
        return None
    return found.group("right"), found.group("strike")


def _expiry(ctx: GrammarContext, token: str) -> Optional[date]:
    found = _EXPIRY.match(token)
    if found is None:
        return None
    year = ctx.resolver.resolve_two_digit_year(int(found.group("year")), ctx.reference_date())
    try:
        return date(year, int(found.group("month")), int(found.group("day")))
    except ValueError:
        return None


def _match(ctx: GrammarContext, tokens: Tokens) -> Optional[MatchStrength]:
    if len(tokens) not in (5, 6) or tokens[-1] not in CLASS_SUFFIXES:
        return None
    if tokens[1].upper() not in VENUE_CODES:
        return None
    if _right_and_strike(tokens) is None or _expiry(ctx, tokens[2]) is None:
        return None
    if ctx.info_for_alias(tokens[0]) is not None:
        return MatchStrength.MAPPED
    return MatchStrength.SHAPE


def _parse(ctx: GrammarContext, tokens: Tokens) -> Instrument:
    expiry = _expiry(ctx, tokens[2])
    right_strike = _right_and_strike(tokens)
    if expiry is None or right_strike is None:
        raise ArgumentError(f"Malformed option ticker: {' '.join(tokens)!r}")
    right, raw_strike = right_strike
    try:
        strike = Decimal(raw_strike)
    except InvalidOperation as exc:
        raise ArgumentError(f"Invalid strike in option ticker: {raw_strike!r}") from exc
    info = ctx.info_for_alias(tokens[0])
    underlying = info.underlying if info is not None else tokens[0]
    return Instrument.option(
        underlying,
        VENUE_CODES[tokens[1].upper()],
        OptionRight.from_code(right),
        strike,
        expiry,
    )


def _format(ctx: GrammarContext, instrument: Instrument) -> str:
    assert instrument.expiry is not None and instrument.right is not None
    venue = MARKET_VENUE_CODES.get(instrument.market.lower())
    if venue is None:
        raise UnsupportedInstrumentError(
            f"Unsupported market '{instrument.market}' for security type option"
        )
    short_year = instrument.expiry.year % 100
    if ctx.resolver.resolve_two_digit_year(short_year, ctx.reference_date()) != instrument.expiry.year:
        raise ArgumentError(
            f"Option expiry {instrument.expiry.isoformat()} is outside the two-digit year window"
        )
    underlying = instrument.underlying or instrument.root
    info = ctx.info_for_root(underlying)
    vendor = info.vendor_root if info is not None else underlying
    class_suffix = "Index" if info is not None and info.security_type is SecurityType.INDEX else "Equity"
    return (
        f"{vendor} {venue} {instrument.expiry:%m/%d/%y} "
        f"{instrument.right.code} {instrument.strike:.2f} {class_suffix}"
    )


OPTION = Grammar(
    name="option",
    security_type=SecurityType.OPTION,
    match=_match,
    parse=_parse,
    format=_format,
)
