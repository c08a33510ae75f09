"""Currency tickers.

Two spellings are in use on the terminal: the full pair (``EURUSD Curncy``,
optionally with a pricing source such as ``EURUSD BGN Curncy``) and the
single-leg valuation form ``EUR BVAL Curncy`` where the quote leg is implied.
"""
from __future__ import annotations

from typing import Optional

from tickerlink.errors import ArgumentError
from tickerlink.grammars.base import Grammar, GrammarContext, MatchStrength, Tokens
from tickerlink.types import Instrument, MappingInfo, SecurityType

__all__ = ["FOREX", "VALUATION_SOURCE"]

CLASS_SUFFIX = "Curncy"
VALUATION_SOURCE = "BVAL"


def _is_currency(code: str, length: int) -> bool:
    return len(code) == length and code.isalpha() and code.isascii()


def _is_source(token: str) -> bool:
    return 3 <= len(token) <= 4 and token.isalpha() and token.isupper()


def _lookup(ctx: GrammarContext, head: str) -> Optional[MappingInfo]:
    return ctx.info_for_alias(head, SecurityType.FOREX)


def _match(ctx: GrammarContext, tokens: Tokens) -> Optional[MatchStrength]:
    if len(tokens) not in (2, 3) or tokens[-1] != CLASS_SUFFIX:
        return None
    head = tokens[0]
    source = tokens[1] if len(tokens) == 3 else None
    if source is not None and not _is_source(source):
        return None
    if _lookup(ctx, head) is not None:
        return MatchStrength.MAPPED
    if _is_currency(head, 6):
        return MatchStrength.SHAPE
    if _is_currency(head, 3) and source == VALUATION_SOURCE:
        return MatchStrength.SHAPE
    return None


def _pair_from_leg(leg: str, quote: str) -> str:
    return f"{leg.upper()}{quote.upper()}"


def _parse(ctx: GrammarContext, tokens: Tokens) -> Instrument:
    head = tokens[0]
    info = _lookup(ctx, head)
    if info is not None:
        pair = info.underlying.upper()
        if _is_currency(pair, 3):
            pair = _pair_from_leg(pair, info.quote_currency or ctx.quote_currency)
        return Instrument.forex(pair, info.market or ctx.forex_market)
    if _is_currency(head, 3):
        return Instrument.forex(_pair_from_leg(head, ctx.quote_currency), ctx.forex_market)
    return Instrument.forex(head.upper(), ctx.forex_market)


def _format(ctx: GrammarContext, instrument: Instrument) -> str:
    pair = instrument.root
    if not _is_currency(pair, 6):
        raise ArgumentError(f"Currency pair must be six letters, got {pair!r}")
    info = ctx.info_for_root(pair, SecurityType.FOREX)
    if info is None:
        return f"{pair.upper()} {CLASS_SUFFIX}"
    suffix = info.ticker_suffix or CLASS_SUFFIX
    if info.suffix_tokens[-1:] != (CLASS_SUFFIX,):
        suffix = f"{suffix} {CLASS_SUFFIX}"
    return f"{info.vendor_root} {suffix}"


FOREX = Grammar(
    name="forex",
    security_type=SecurityType.FOREX,
    match=_match,
    parse=_parse,
    format=_format,
)
