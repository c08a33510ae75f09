"""Bidirectional mapping between terminal tickers and engine instruments."""
from __future__ import annotations

from pathlib import Path

from .errors import (
    AmbiguousFormatError,
    AmbiguousYearError,
    ArgumentError,
    ConfigError,
    TickerLinkError,
    UnsupportedInstrumentError,
)
from .gateway import ChainLookup, ChainProvider
from .logging_setup import setup_logging
from .mapper import SymbolMapper
from .mapping import MappingTable
from .types import Instrument, MappingInfo, Market, OptionRight, SecurityType

__all__ = [
    "AmbiguousFormatError",
    "AmbiguousYearError",
    "ArgumentError",
    "ChainLookup",
    "ChainProvider",
    "ConfigError",
    "Instrument",
    "MappingInfo",
    "MappingTable",
    "Market",
    "OptionRight",
    "SAMPLE_SYMBOL_MAP",
    "SecurityType",
    "SymbolMapper",
    "TickerLinkError",
    "UnsupportedInstrumentError",
    "setup_logging",
]

__version__ = "0.1.0"

SAMPLE_SYMBOL_MAP = Path(__file__).resolve().parent / "data" / "symbol-map.json"
