"""Futures chain and contract tickers.

Chain (canonical) tickers append the root lookup suffix to the vendor root,
``BO1 COMB Comdty``; contract tickers append the month code and year digits,
``BOH0 COMB Comdty``. Single-character roots are padded with a space before
the month code (``C H0 Comdty``). The ``COMB`` exchange token is optional on
input.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

from tickerlink.errors import ArgumentError
from tickerlink.grammars.base import Grammar, GrammarContext, MatchStrength, Tokens
from tickerlink.types import Instrument, MappingInfo, SecurityType

__all__ = ["FUTURE_CANONICAL", "FUTURE_DATED", "CLASS_SUFFIXES", "EXCHANGE_SUFFIX"]

CLASS_SUFFIXES = ("Comdty", "Curncy", "Index")
EXCHANGE_SUFFIX = "COMB"
DEFAULT_CLASS_SUFFIX = "Comdty"
DEFAULT_LOOKUP_SUFFIX = "1"

_CONTRACT_CODE = re.compile(r"^(?P<month>[FGHJKMNQUVXZ])(?P<year>\d{1,2})$")
_UNMAPPED_CONTRACT = re.compile(r"^(?P<alias>[A-Z0-9]{2,}?)(?P<month>[FGHJKMNQUVXZ])(?P<year>\d{1,2})$")
# Unmapped roots: single-character roots must be written with the padding
# space, and a chain root never ends in a digit. Text matching both patterns
# is reported by both grammars and rejected as ambiguous by the mapper.
_UNMAPPED_CHAIN = re.compile(r"^(?P<alias>[A-Z0-9]*[A-Z])1$")

_FUTURE_KINDS = (SecurityType.FUTURE,)


def _head(tokens: Tokens) -> Optional[Tokens]:
    """Strip the class and optional exchange tokens; return the root tokens."""

    if len(tokens) < 2 or tokens[-1] not in CLASS_SUFFIXES:
        return None
    rest = tokens[:-1]
    if rest and rest[-1] == EXCHANGE_SUFFIX:
        rest = rest[:-1]
    if len(rest) == 1 or (len(rest) == 2 and len(rest[0]) == 1):
        return rest
    return None


def _future_info(ctx: GrammarContext, alias: str) -> Optional[MappingInfo]:
    return ctx.info_for_alias(alias, *_FUTURE_KINDS)


def _lookup_suffix(info: Optional[MappingInfo]) -> str:
    if info is not None and info.root_lookup_suffix:
        return info.root_lookup_suffix
    return DEFAULT_LOOKUP_SUFFIX


def _split_chain(ctx: GrammarContext, head: Tokens) -> Optional[Tuple[str, Optional[MappingInfo]]]:
    if len(head) == 2:
        info = _future_info(ctx, head[0])
        if head[1].upper() == _lookup_suffix(info).upper():
            return head[0], info
        return None
    text = head[0].upper()
    for alias in ctx.table.aliases():
        info = _future_info(ctx, alias)
        if info is not None and text == f"{alias}{_lookup_suffix(info)}".upper():
            return alias, info
    found = _UNMAPPED_CHAIN.match(text)
    if found is None:
        return None
    if _future_info(ctx, found.group("alias")) is None:
        return found.group("alias"), None
    return None


def _split_contract(
    ctx: GrammarContext, head: Tokens
) -> Optional[Tuple[str, str, str, Optional[MappingInfo]]]:
    if len(head) == 2:
        code = _CONTRACT_CODE.match(head[1].upper())
        if code is None:
            return None
        return head[0], code.group("month"), code.group("year"), _future_info(ctx, head[0])
    text = head[0].upper()
    for alias in ctx.table.aliases():
        if not text.startswith(alias.upper()):
            continue
        info = _future_info(ctx, alias)
        code = _CONTRACT_CODE.match(text[len(alias):])
        if info is not None and code is not None:
            return alias, code.group("month"), code.group("year"), info
    found = _UNMAPPED_CONTRACT.match(text)
    if found is None:
        return None
    return found.group("alias"), found.group("month"), found.group("year"), None


def _suffix(info: Optional[MappingInfo]) -> str:
    if info is not None and info.ticker_suffix:
        return info.ticker_suffix
    return f"{EXCHANGE_SUFFIX} {DEFAULT_CLASS_SUFFIX}"


def _root_and_market(ctx: GrammarContext, alias: str, info: Optional[MappingInfo]) -> Tuple[str, str]:
    if info is not None:
        return info.underlying, info.market or ctx.future_market
    return alias, ctx.future_market


def _match_chain(ctx: GrammarContext, tokens: Tokens) -> Optional[MatchStrength]:
    head = _head(tokens)
    if head is None:
        return None
    split = _split_chain(ctx, head)
    if split is None:
        return None
    return MatchStrength.MAPPED if split[1] is not None else MatchStrength.SHAPE


def _parse_chain(ctx: GrammarContext, tokens: Tokens) -> Instrument:
    head = _head(tokens)
    assert head is not None
    split = _split_chain(ctx, head)
    assert split is not None
    root, market = _root_and_market(ctx, *split)
    return Instrument.canonical_future(root, market)


def _format_chain(ctx: GrammarContext, instrument: Instrument) -> str:
    info = ctx.info_for_root(instrument.root, *_FUTURE_KINDS)
    if info is None:
        text = f"{instrument.root}{DEFAULT_LOOKUP_SUFFIX}".upper()
        found = _UNMAPPED_CHAIN.match(text)
        if found is None or _UNMAPPED_CONTRACT.match(text) is not None:
            raise ArgumentError(
                f"Chain ticker for unmapped root '{instrument.root}' would not parse back; "
                "add a symbol map record with an alias or root lookup suffix"
            )
    vendor = info.vendor_root if info is not None else instrument.root
    return f"{vendor}{_lookup_suffix(info)} {_suffix(info)}"


def _match_contract(ctx: GrammarContext, tokens: Tokens) -> Optional[MatchStrength]:
    head = _head(tokens)
    if head is None:
        return None
    split = _split_contract(ctx, head)
    if split is None:
        return None
    return MatchStrength.MAPPED if split[3] is not None else MatchStrength.SHAPE


def _parse_contract(ctx: GrammarContext, tokens: Tokens) -> Instrument:
    head = _head(tokens)
    assert head is not None
    split = _split_contract(ctx, head)
    assert split is not None
    alias, month_letter, year_digits, info = split
    year = ctx.resolver.resolve_year(alias, month_letter, year_digits, ctx.reference_date())
    expiry = ctx.resolver.contract_expiry(info, month_letter, year)
    root, market = _root_and_market(ctx, alias, info)
    return Instrument.future(root, market, expiry)


def _format_contract(ctx: GrammarContext, instrument: Instrument) -> str:
    assert instrument.expiry is not None
    info = ctx.info_for_root(instrument.root, *_FUTURE_KINDS)
    vendor = info.vendor_root if info is not None else instrument.root
    letter = ctx.resolver.month_letter_for(instrument.expiry.month)
    expected = ctx.resolver.contract_expiry(info, letter, instrument.expiry.year)
    if instrument.expiry != expected:
        raise ArgumentError(
            f"Expiry {instrument.expiry.isoformat()} of '{instrument.root}' does not match the "
            f"configured contract expiry {expected.isoformat()}"
        )
    pad = " " if len(vendor) == 1 else ""
    digits = ctx.resolver.year_digits_for(
        instrument.expiry.year, ctx.reference_date(), instrument.root
    )
    if digits == "1" and info is None and not pad:
        # "ZWN1" would also read as the chain ticker of root "ZWN".
        digits = ctx.resolver.year_digits_for(
            instrument.expiry.year, ctx.reference_date(), instrument.root, min_digits=2
        )
    return f"{vendor}{pad}{letter}{digits} {_suffix(info)}"


FUTURE_CANONICAL = Grammar(
    name="future_canonical",
    security_type=SecurityType.FUTURE,
    match=_match_chain,
    parse=_parse_chain,
    format=_format_chain,
)

FUTURE_DATED = Grammar(
    name="future_dated",
    security_type=SecurityType.FUTURE,
    match=_match_contract,
    parse=_parse_contract,
    format=_format_contract,
)
