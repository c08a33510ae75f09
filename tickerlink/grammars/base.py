from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Callable, NamedTuple, Optional, Tuple

from tickerlink.futures import FutureCodeResolver
from tickerlink.mapping import MappingTable
from tickerlink.types import Instrument, MappingInfo, Market, SecurityType

__all__ = [
    "GrammarContext",
    "Grammar",
    "MatchStrength",
    "Tokens",
    "tokenize",
]

Tokens = Tuple[str, ...]


class MatchStrength(IntEnum):
    """How firmly a grammar accepted a ticker."""

    SHAPE = 1
    MAPPED = 2


@dataclass(frozen=True)
class GrammarContext:
    """Read-only inputs shared by every grammar function."""

    table: MappingTable
    resolver: FutureCodeResolver = field(default_factory=FutureCodeResolver)
    as_of: Optional[date] = None
    equity_market: str = Market.USA
    forex_market: str = Market.FXCM
    future_market: str = Market.USA
    quote_currency: str = "USD"

    def reference_date(self) -> date:
        return self.as_of or date.today()

    def info_for_alias(self, alias: str, *kinds: SecurityType) -> Optional[MappingInfo]:
        info = self.table.lookup_alias(alias)
        if info is None or (kinds and info.security_type not in kinds):
            return None
        return info

    def info_for_root(self, root: str, *kinds: SecurityType) -> Optional[MappingInfo]:
        info = self.table.lookup(root)
        if info is None or (kinds and info.security_type not in kinds):
            return None
        return info


class Grammar(NamedTuple):
    """One instrument class: a shape test plus a format/parse pair."""

    name: str
    security_type: SecurityType
    match: Callable[[GrammarContext, Tokens], Optional[MatchStrength]]
    parse: Callable[[GrammarContext, Tokens], Instrument]
    format: Callable[[GrammarContext, Instrument], str]


def tokenize(ticker: str) -> Tokens:
    return tuple(ticker.split())
