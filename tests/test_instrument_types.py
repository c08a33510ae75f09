from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from tickerlink.errors import ArgumentError
from tickerlink.types import Instrument, Market, OptionRight, SecurityType


def test_values_render_engine_identifiers() -> None:
    assert Instrument.equity("SPY").value == "SPY"
    assert Instrument.forex("EURUSD").value == "EURUSD"
    assert Instrument.canonical_future("ZL", Market.CBOT).value == "/ZL"
    assert Instrument.future("ZL", Market.CBOT, date(2020, 3, 13)).value == "ZL13H20"
    assert Instrument.future("CL", Market.NYMEX, date(2028, 3, 22)).value == "CL22H28"
    option = Instrument.option("SPY", Market.USA, OptionRight.CALL, "200", date(2019, 12, 31))
    assert option.value == "SPY 191231C00200000"
    assert str(option) == option.value


def test_factories_set_defaults() -> None:
    assert Instrument.equity("SPY").market == "usa"
    assert Instrument.forex("EURUSD").market == "fxcm"
    canonical = Instrument.canonical_future("ES", Market.CME)
    assert canonical.is_canonical
    assert canonical.underlying == "ES"
    assert canonical.expiry is None


def test_security_type_is_coerced_from_text() -> None:
    instrument = Instrument(root="SPY", security_type="Equity", market="usa")  # type: ignore[arg-type]

    assert instrument.security_type is SecurityType.EQUITY


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("200", Decimal("200.00")), (200.005, Decimal("200.01")), (Decimal("12.5"), Decimal("12.50"))],
)
def test_strike_is_quantized(raw, expected: Decimal) -> None:
    option = Instrument.option("SPY", Market.USA, OptionRight.PUT, raw, date(2020, 1, 17))

    assert option.strike == expected


@pytest.mark.parametrize("strike", ["abc", "NaN", "Infinity"])
def test_invalid_strike(strike: str) -> None:
    with pytest.raises(ArgumentError):
        Instrument.option("SPY", Market.USA, OptionRight.CALL, strike, date(2020, 1, 17))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"root": "SPY", "security_type": SecurityType.EQUITY, "market": "usa", "expiry": date(2020, 1, 1)},
        {"root": "SPY", "security_type": SecurityType.EQUITY, "market": "usa", "strike": Decimal("1")},
        {"root": "CL", "security_type": SecurityType.FUTURE, "market": "nymex"},
        {
            "root": "CL",
            "security_type": SecurityType.FUTURE,
            "market": "nymex",
            "expiry": date(2020, 3, 20),
            "is_canonical": True,
        },
        {"root": "SPY", "security_type": SecurityType.EQUITY, "market": "usa", "is_canonical": True},
        {
            "root": "SPY",
            "security_type": SecurityType.OPTION,
            "market": "usa",
            "underlying": "SPY",
            "expiry": date(2020, 1, 17),
            "right": OptionRight.CALL,
        },
    ],
)
def test_invariants_are_enforced(kwargs) -> None:
    with pytest.raises(ArgumentError):
        Instrument(**kwargs)


def test_security_type_parse() -> None:
    assert SecurityType.parse(" FUTURE ") is SecurityType.FUTURE
    assert SecurityType.parse(SecurityType.CFD) is SecurityType.CFD
    with pytest.raises(ArgumentError):
        SecurityType.parse("swap")


def test_option_right_codes() -> None:
    assert OptionRight.from_code("p") is OptionRight.PUT
    assert OptionRight.CALL.code == "C"
    with pytest.raises(ArgumentError):
        OptionRight.from_code("X")
