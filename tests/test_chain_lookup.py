from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Tuple

import pytest

from tickerlink.errors import AmbiguousFormatError, ArgumentError, UnsupportedInstrumentError
from tickerlink.gateway import ChainLookup, ChainProvider
from tickerlink.mapper import SymbolMapper
from tickerlink.mapping import MappingTable
from tickerlink.types import Market, OptionRight, SecurityType

from conftest import AS_OF


class RecordingProvider:
    """In-memory gateway that remembers every chain request."""

    def __init__(self, chains: Dict[str, List[str]]) -> None:
        self.chains = chains
        self.calls: List[Tuple[str, SecurityType, bool]] = []

    def get_chain(self, ticker: str, security_type: SecurityType, include_expired: bool):
        self.calls.append((ticker, security_type, include_expired))
        return list(self.chains.get(ticker, []))


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider(
        {
            "BO1 COMB Comdty": ["BOH0 COMB Comdty", "BOK0 COMB Comdty"],
            "SPY US Equity": [
                "SPY UO 01/17/20 C 320.00 Equity",
                "SPY UO 01/17/20 P 320.00 Equity",
            ],
            "SPX Index": ["SPX UO 03/20/20 C 3250.00 Index"],
            "CL1 COMB Comdty": ["CLH0 COMB Comdty", "not a ticker"],
        }
    )


@pytest.fixture
def gateway_mapper(symbol_table: MappingTable, provider: RecordingProvider) -> SymbolMapper:
    return SymbolMapper(symbol_table, chain_provider=provider, as_of=AS_OF)


def test_recording_provider_satisfies_protocol(provider: RecordingProvider) -> None:
    assert isinstance(provider, ChainProvider)


def test_future_chain_from_gateway(
    gateway_mapper: SymbolMapper, provider: RecordingProvider
) -> None:
    contracts = list(gateway_mapper.lookup_symbols("ZL", SecurityType.FUTURE))

    assert [contract.value for contract in contracts] == ["ZL13H20", "ZL01K20"]
    assert all(contract.market == Market.CBOT for contract in contracts)
    assert provider.calls == [("BO1 COMB Comdty", SecurityType.FUTURE, False)]


def test_lookup_is_lazy_and_restartable(
    gateway_mapper: SymbolMapper, provider: RecordingProvider
) -> None:
    lookup = gateway_mapper.lookup_symbols("ZL", "future", include_expired=True)

    assert isinstance(lookup, ChainLookup)
    assert provider.calls == []

    first = list(lookup)
    second = list(lookup)

    assert first == second
    assert len(provider.calls) == 2
    assert provider.calls[0] == ("BO1 COMB Comdty", SecurityType.FUTURE, True)


def test_manual_chain_wins_over_gateway(
    gateway_mapper: SymbolMapper, provider: RecordingProvider
) -> None:
    contracts = list(gateway_mapper.lookup_symbols("NG", SecurityType.FUTURE))

    assert [contract.expiry for contract in contracts] == [
        date(2020, 1, 1),
        date(2020, 2, 1),
        date(2020, 3, 1),
    ]
    assert provider.calls == []


def test_option_chain_uses_underlying_ticker(gateway_mapper: SymbolMapper) -> None:
    options = list(gateway_mapper.lookup_symbols("SPY", SecurityType.OPTION))

    assert [option.right for option in options] == [OptionRight.CALL, OptionRight.PUT]
    assert {option.underlying for option in options} == {"SPY"}


def test_index_option_chain(gateway_mapper: SymbolMapper, provider: RecordingProvider) -> None:
    options = list(gateway_mapper.lookup_symbols("SPX", SecurityType.OPTION))

    assert provider.calls[-1][0] == "SPX Index"
    assert options[0].value == "SPX 200320C03250000"


def test_chain_stops_on_unparseable_member(gateway_mapper: SymbolMapper) -> None:
    members = iter(gateway_mapper.lookup_symbols("CL", SecurityType.FUTURE))

    assert next(members).value == "CL20H20"
    with pytest.raises(AmbiguousFormatError):
        next(members)


def test_lookup_without_gateway(
    symbol_table: MappingTable, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger="tickerlink.gateway")
    mapper = SymbolMapper(symbol_table, as_of=AS_OF)

    assert list(mapper.lookup_symbols("CL", SecurityType.FUTURE)) == []
    assert any(
        "chain_lookup_unavailable" in record.message and "ticker=CL1 COMB Comdty" in record.message
        for record in caplog.records
    )


def test_lookup_logs_source(
    gateway_mapper: SymbolMapper, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="tickerlink.gateway")

    list(gateway_mapper.lookup_symbols("NG", SecurityType.FUTURE))

    messages = [record.message for record in caplog.records]
    assert any(message.startswith("chain_lookup ") and "source=manual" in message for message in messages)
    assert any("chain_lookup_done" in message and "contracts=3" in message for message in messages)


@pytest.mark.parametrize(
    "security_type", [SecurityType.EQUITY, SecurityType.FOREX, SecurityType.CFD, "index"]
)
def test_only_future_and_option_chains(gateway_mapper: SymbolMapper, security_type) -> None:
    with pytest.raises(UnsupportedInstrumentError):
        gateway_mapper.lookup_symbols("SPY", security_type)


@pytest.mark.parametrize("root", ["", "   "])
def test_chain_root_required(gateway_mapper: SymbolMapper, root: str) -> None:
    with pytest.raises(ArgumentError):
        gateway_mapper.lookup_symbols(root, SecurityType.FUTURE)


def test_unmapped_future_chain(gateway_mapper: SymbolMapper) -> None:
    lookup = gateway_mapper.lookup_symbols("ZW", SecurityType.FUTURE)

    assert lookup.canonical_ticker == "ZW1 COMB Comdty"
    assert list(lookup) == []
