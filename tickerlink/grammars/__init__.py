"""Ticker grammars, one per instrument class.

``GRAMMARS`` lists them in the order they are tried when no security type
hint is given. Formatting dispatches on ``(security_type, is_canonical)``.
"""
from __future__ import annotations

from typing import Dict, Tuple

from tickerlink.errors import UnsupportedInstrumentError
from tickerlink.types import Instrument, SecurityType

from .base import Grammar, GrammarContext, MatchStrength, Tokens, tokenize
from .equity import EQUITY
from .forex import FOREX
from .future import FUTURE_CANONICAL, FUTURE_DATED
from .option import OPTION

__all__ = [
    "GRAMMARS",
    "Grammar",
    "GrammarContext",
    "MatchStrength",
    "Tokens",
    "grammar_for",
    "tokenize",
]

GRAMMARS: Tuple[Grammar, ...] = (EQUITY, FOREX, FUTURE_CANONICAL, FUTURE_DATED, OPTION)

_FORMATTERS: Dict[Tuple[SecurityType, bool], Grammar] = {
    (SecurityType.EQUITY, False): EQUITY,
    (SecurityType.FOREX, False): FOREX,
    (SecurityType.FUTURE, True): FUTURE_CANONICAL,
    (SecurityType.FUTURE, False): FUTURE_DATED,
    (SecurityType.OPTION, False): OPTION,
}


def grammar_for(instrument: Instrument) -> Grammar:
    """Return the grammar that formats *instrument*."""

    try:
        return _FORMATTERS[(instrument.security_type, instrument.is_canonical)]
    except KeyError as exc:
        raise UnsupportedInstrumentError(
            f"Unsupported security type: {instrument.security_type.value}"
        ) from exc
