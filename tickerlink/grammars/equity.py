"""``{Root} {ExchangeCode} Equity`` tickers."""
from __future__ import annotations

from typing import Dict, Optional

from tickerlink.errors import UnsupportedInstrumentError
from tickerlink.grammars.base import Grammar, GrammarContext, MatchStrength, Tokens
from tickerlink.types import Instrument, Market, SecurityType

__all__ = ["EQUITY", "EXCHANGE_CODES", "MARKET_EXCHANGE_CODES"]

CLASS_SUFFIX = "Equity"

# Composite and primary-listing codes that all resolve to the US market.
EXCHANGE_CODES: Dict[str, str] = {
    "US": Market.USA,
    "UN": Market.USA,
    "UW": Market.USA,
    "UQ": Market.USA,
    "UA": Market.USA,
    "UP": Market.USA,
    "UR": Market.USA,
}

MARKET_EXCHANGE_CODES: Dict[str, str] = {Market.USA: "US"}


def _match(ctx: GrammarContext, tokens: Tokens) -> Optional[MatchStrength]:
    if len(tokens) < 3 or tokens[-1] != CLASS_SUFFIX:
        return None
    if tokens[-2].upper() not in EXCHANGE_CODES:
        return None
    root = " ".join(tokens[:-2])
    if ctx.info_for_alias(root, SecurityType.EQUITY) is not None:
        return MatchStrength.MAPPED
    return MatchStrength.SHAPE


def _parse(ctx: GrammarContext, tokens: Tokens) -> Instrument:
    root = " ".join(tokens[:-2])
    info = ctx.info_for_alias(root, SecurityType.EQUITY)
    market = EXCHANGE_CODES[tokens[-2].upper()]
    if info is not None:
        return Instrument.equity(info.underlying, info.market or market)
    return Instrument.equity(root, market)


def _format(ctx: GrammarContext, instrument: Instrument) -> str:
    code = MARKET_EXCHANGE_CODES.get(instrument.market.lower())
    if code is None:
        raise UnsupportedInstrumentError(
            f"Unsupported market '{instrument.market}' for security type equity"
        )
    info = ctx.info_for_root(instrument.root, SecurityType.EQUITY)
    vendor = info.vendor_root if info is not None else instrument.root
    return f"{vendor} {code} {CLASS_SUFFIX}"


EQUITY = Grammar(
    name="equity",
    security_type=SecurityType.EQUITY,
    match=_match,
    parse=_parse,
    format=_format,
)
