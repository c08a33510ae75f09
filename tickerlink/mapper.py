"""Symbol mapper facade.

Translates between terminal tickers and :class:`~tickerlink.types.Instrument`
values. The mapper owns an immutable :class:`MappingTable` and keeps no other
state, so one instance can serve concurrent callers without locking.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional, Tuple

from tickerlink.config import Settings, load_settings
from tickerlink.errors import AmbiguousFormatError, ArgumentError, UnsupportedInstrumentError
from tickerlink.futures import FutureCodeResolver
from tickerlink.gateway import ChainLookup, ChainProvider
from tickerlink.grammars import GRAMMARS, Grammar, GrammarContext, MatchStrength, grammar_for, tokenize
from tickerlink.logging_setup import setup_logging
from tickerlink.mapping import MappingTable
from tickerlink.types import Instrument, MappingInfo, Market, SecurityType

__all__ = ["SymbolMapper"]

logger = logging.getLogger(__name__)

_CHAIN_TYPES = (SecurityType.FUTURE, SecurityType.OPTION)


def _log_event(level: int, event: str, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    parts: list[str] = [event]
    for key, value in fields.items():
        if value is None:
            continue
        parts.append(f"{key}={value}")
    logger.log(level, " ".join(parts))


class SymbolMapper:
    """Bidirectional translator between terminal tickers and instruments."""

    def __init__(
        self,
        table: MappingTable | None = None,
        *,
        chain_provider: ChainProvider | None = None,
        resolver: FutureCodeResolver | None = None,
        as_of: date | None = None,
        equity_market: str = Market.USA,
        forex_market: str = Market.FXCM,
        future_market: str = Market.USA,
        quote_currency: str = "USD",
    ) -> None:
        self._context = GrammarContext(
            table=table if table is not None else MappingTable(),
            resolver=resolver or FutureCodeResolver(),
            as_of=as_of,
            equity_market=equity_market,
            forex_market=forex_market,
            future_market=future_market,
            quote_currency=quote_currency.upper(),
        )
        self._chain_provider = chain_provider

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        chain_provider: ChainProvider | None = None,
        as_of: date | None = None,
        configure_logging: bool = False,
    ) -> "SymbolMapper":
        """Build a mapper from resolved settings, loading the symbol map file.

        With ``configure_logging`` the package log handlers are installed at
        ``settings.log_level`` before the map is read.
        """

        settings = settings or load_settings()
        if configure_logging:
            setup_logging(settings.log_level)
        table = MappingTable.load(
            settings.symbol_map_file, required=settings.symbol_map_required
        )
        return cls(
            table,
            chain_provider=chain_provider,
            resolver=FutureCodeResolver(settings.year_horizon),
            as_of=as_of,
            equity_market=settings.default_equity_market,
            forex_market=settings.default_forex_market,
            future_market=settings.default_future_market,
            quote_currency=settings.default_quote_currency,
        )

    @property
    def table(self) -> MappingTable:
        return self._context.table

    @property
    def context(self) -> GrammarContext:
        return self._context

    def get_brokerage_symbol(self, instrument: Instrument | None) -> str:
        """Format *instrument* as a terminal ticker."""

        if instrument is None or not instrument.root or not instrument.root.strip():
            raise ArgumentError(f"Invalid symbol: {instrument!r}")
        grammar = grammar_for(instrument)
        ticker = grammar.format(self._context, instrument)
        _log_event(
            logging.DEBUG,
            "symbol_formatted",
            instrument=instrument.value,
            ticker=ticker,
            grammar=grammar.name,
        )
        return ticker

    def get_lean_symbol(
        self, ticker: str | None, security_type: SecurityType | str | None = None
    ) -> Instrument:
        """Parse a terminal ticker, optionally restricted to one security type."""

        if ticker is None or not str(ticker).strip():
            raise ArgumentError(f"Invalid brokerage symbol: {ticker!r}")
        hint = SecurityType.parse(security_type) if security_type is not None else None
        candidates = [g for g in GRAMMARS if hint is None or g.security_type is hint]
        if not candidates:
            raise UnsupportedInstrumentError(f"No ticker grammar for security type {hint.value}")

        tokens = tokenize(ticker)
        matches: List[Tuple[Grammar, MatchStrength]] = []
        for grammar in candidates:
            strength = grammar.match(self._context, tokens)
            if strength is not None:
                matches.append((grammar, strength))

        if not matches:
            _log_event(
                logging.WARNING,
                "symbol_unparsed",
                ticker=ticker,
                hint=hint.value if hint else None,
                action="fail",
            )
            raise AmbiguousFormatError(ticker)

        best = max(strength for _, strength in matches)
        winners = [grammar for grammar, strength in matches if strength == best]
        if len(winners) > 1:
            names = [grammar.name for grammar in winners]
            _log_event(
                logging.WARNING,
                "symbol_ambiguous",
                ticker=ticker,
                grammars=",".join(names),
                hint=hint.value if hint else None,
            )
            raise AmbiguousFormatError(ticker, names)

        grammar = winners[0]
        instrument = grammar.parse(self._context, tokens)
        _log_event(
            logging.DEBUG,
            "symbol_parsed",
            ticker=ticker,
            instrument=instrument.value,
            grammar=grammar.name,
            mapped=str(best is MatchStrength.MAPPED).lower(),
        )
        return instrument

    def lookup_symbols(
        self,
        root_or_underlying: str,
        security_type: SecurityType | str,
        include_expired: bool = False,
    ) -> ChainLookup:
        """Return the contracts of a futures or option chain, parsed lazily."""

        if not root_or_underlying or not root_or_underlying.strip():
            raise ArgumentError(f"Invalid chain root: {root_or_underlying!r}")
        kind = SecurityType.parse(security_type)
        if kind not in _CHAIN_TYPES:
            raise UnsupportedInstrumentError(
                f"Only future and option chains are supported, got {kind.value}"
            )

        root = root_or_underlying.strip()
        info = self.table.lookup(root)
        if kind is SecurityType.FUTURE:
            canonical_ticker = self._future_chain_ticker(root, info)
        else:
            canonical_ticker = self._option_chain_ticker(root, info)

        return ChainLookup(
            canonical_ticker=canonical_ticker,
            security_type=kind,
            include_expired=include_expired,
            parse=self.get_lean_symbol,
            provider=self._chain_provider,
            manual_chain=info.chain if info is not None else (),
        )

    def _future_chain_ticker(self, root: str, info: Optional[MappingInfo]) -> str:
        if info is not None:
            canonical = Instrument.canonical_future(info.underlying, info.market)
        else:
            canonical = Instrument.canonical_future(root, self._context.future_market)
        return self.get_brokerage_symbol(canonical)

    def _option_chain_ticker(self, root: str, info: Optional[MappingInfo]) -> str:
        if info is not None and info.security_type is SecurityType.INDEX:
            return f"{info.vendor_root} {info.ticker_suffix or 'Index'}"
        if info is not None:
            return self.get_brokerage_symbol(Instrument.equity(info.underlying, info.market))
        return self.get_brokerage_symbol(Instrument.equity(root, self._context.equity_market))

    def get_market(self, root: str) -> Optional[str]:
        """Market configured for *root*, or ``None`` when unmapped."""

        info = self.table.lookup(root)
        return info.market if info is not None and info.market else None

    def get_manual_chain(self, root: str) -> Optional[Tuple[str, ...]]:
        """Configured chain tickers for *root*, or ``None`` when none are set."""

        info = self.table.lookup(root)
        return info.chain if info is not None and info.chain else None
