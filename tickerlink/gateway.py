"""Chain discovery interface of the market-data gateway.

The mapper never talks to the terminal itself. Whoever owns the session
implements :class:`ChainProvider`; :class:`ChainLookup` turns the vendor
tickers it returns into instruments on demand.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence, runtime_checkable

from tickerlink.types import Instrument, SecurityType

__all__ = ["ChainProvider", "ChainLookup"]

logger = logging.getLogger(__name__)


@runtime_checkable
class ChainProvider(Protocol):
    """Returns the vendor tickers of every contract in a chain."""

    def get_chain(
        self, ticker: str, security_type: SecurityType, include_expired: bool
    ) -> Iterable[str]:
        ...


class ChainLookup:
    """Lazy, restartable sequence of chain members.

    Each iteration asks the source again; nothing is cached between passes.
    """

    def __init__(
        self,
        *,
        canonical_ticker: str,
        security_type: SecurityType,
        include_expired: bool,
        parse: Callable[[str, SecurityType], Instrument],
        provider: Optional[ChainProvider] = None,
        manual_chain: Sequence[str] = (),
    ) -> None:
        self.canonical_ticker = canonical_ticker
        self.security_type = security_type
        self.include_expired = include_expired
        self._parse = parse
        self._provider = provider
        self._manual_chain = tuple(manual_chain)

    def _tickers(self) -> Iterable[str]:
        if self._manual_chain:
            return self._manual_chain
        if self._provider is None:
            logger.warning(
                "chain_lookup_unavailable ticker=%s reason=no_gateway", self.canonical_ticker
            )
            return ()
        return self._provider.get_chain(
            self.canonical_ticker, self.security_type, self.include_expired
        )

    def __iter__(self) -> Iterator[Instrument]:
        source = "manual" if self._manual_chain else "gateway"
        logger.info(
            "chain_lookup ticker=%s type=%s include_expired=%s source=%s",
            self.canonical_ticker,
            self.security_type.value,
            self.include_expired,
            source,
        )
        count = 0
        for ticker in self._tickers():
            instrument = self._parse(ticker, self.security_type)
            logger.debug("chain_member ticker=%s instrument=%s", ticker, instrument.value)
            count += 1
            yield instrument
        logger.info("chain_lookup_done ticker=%s contracts=%d", self.canonical_ticker, count)

    def __repr__(self) -> str:
        return (
            f"ChainLookup(ticker={self.canonical_ticker!r}, type={self.security_type.value}, "
            f"include_expired={self.include_expired})"
        )
