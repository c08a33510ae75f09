"""Per-root symbol map records.

The map file is keyed by the internal root symbol::

    {
        // soybean oil trades as BO on the terminal
        "ZL": {"Alias": "BO", "Underlying": "ZL", "SecurityType": "Future",
               "Market": "cbot", "TickerSuffix": "COMB Comdty",
               "RootLookupSuffix": "1"}
    }

Lookups are case-insensitive on the key, the underlying and the alias. The
table is immutable once built.
"""
from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from tickerlink.errors import ArgumentError, ConfigError
from tickerlink.types import MappingInfo, SecurityType
from tickerlink.utils.documents import read_document

__all__ = ["MappingTable"]

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("Underlying", "SecurityType", "Market")


def _optional_text(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_expiry_days(root: str, raw: Any) -> Mapping[str, int]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        raise ConfigError(f"ExpiryDays for '{root}' must be an object")
    days: Dict[str, int] = {}
    for key, value in raw.items():
        try:
            day = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"ExpiryDays[{key!r}] for '{root}' is not a day number") from exc
        if not 1 <= day <= 31:
            raise ConfigError(f"ExpiryDays[{key!r}] for '{root}' out of range: {day}")
        days[str(key).strip().upper()] = day
    return MappingProxyType(days)


def _build_info(root: str, raw: Any) -> MappingInfo:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Symbol map entry for '{root}' must be an object")
    missing = [name for name in _REQUIRED_FIELDS if _optional_text(raw, name) is None]
    if missing:
        raise ConfigError(f"Symbol map entry for '{root}' missing: {', '.join(missing)}")
    try:
        security_type = SecurityType.parse(raw["SecurityType"])
    except ArgumentError as exc:
        raise ConfigError(f"Symbol map entry for '{root}': {exc}") from exc

    chain = raw.get("Chain") or ()
    if isinstance(chain, str) or not all(isinstance(item, str) for item in chain):
        raise ConfigError(f"Chain for '{root}' must be a list of tickers")

    return MappingInfo(
        root=root,
        underlying=str(raw["Underlying"]).strip(),
        security_type=security_type,
        market=str(raw["Market"]).strip().lower(),
        alias=_optional_text(raw, "Alias"),
        ticker_suffix=_optional_text(raw, "TickerSuffix"),
        root_lookup_suffix=_optional_text(raw, "RootLookupSuffix"),
        chain=tuple(item.strip() for item in chain),
        quote_currency=(_optional_text(raw, "QuoteCurrency") or "").upper() or None,
        expiry_days=_parse_expiry_days(root, raw.get("ExpiryDays")),
    )


class MappingTable:
    """Immutable, case-insensitive collection of :class:`MappingInfo` records."""

    def __init__(self, entries: Mapping[str, MappingInfo] | None = None) -> None:
        by_key: Dict[str, MappingInfo] = {}
        by_underlying: Dict[str, MappingInfo] = {}
        by_alias: Dict[str, MappingInfo] = {}
        for root, info in (entries or {}).items():
            key = root.strip().upper()
            if key in by_key:
                raise ConfigError(f"Duplicate root in symbol map (case-insensitive): {root!r}")
            by_key[key] = info
            by_underlying.setdefault(info.underlying.upper(), info)
            by_alias.setdefault(info.vendor_root.upper(), info)
        self._entries = MappingProxyType(by_key)
        self._by_underlying = MappingProxyType(by_underlying)
        self._by_alias = MappingProxyType(by_alias)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "MappingTable":
        """Build a table from an already-parsed document."""

        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ConfigError("Symbol map document must be an object keyed by root symbol")
        entries: Dict[str, MappingInfo] = {}
        for root, raw in payload.items():
            name = str(root).strip()
            if not name:
                raise ConfigError("Symbol map contains an empty root key")
            entries[name] = _build_info(name, raw)
        return cls(entries)

    @classmethod
    def load(cls, source: Path | str | None, *, required: bool = False) -> "MappingTable":
        """Load the map file at *source*.

        A missing or empty file yields an empty table unless ``required`` is set.
        """

        if source is None or str(source).strip() == "":
            if required:
                raise ConfigError("No symbol map file configured")
            return cls()
        path = Path(source).expanduser()
        payload = read_document(path)
        if payload is None:
            if required:
                raise ConfigError(f"Symbol map file not found or empty: {path}", path=path)
            logger.warning("mapping_missing path=%s action=empty_table", path)
            return cls()
        try:
            table = cls.from_mapping(payload)
        except ConfigError as exc:
            if exc.path is None:
                exc.path = path
            raise
        logger.info("mapping_loaded path=%s entries=%d", path, len(table))
        return table

    def lookup(self, root: str) -> Optional[MappingInfo]:
        """Find a record by internal root or underlying; ``None`` when unknown."""

        if not root:
            return None
        token = root.strip().upper()
        return self._entries.get(token) or self._by_underlying.get(token)

    def lookup_alias(self, alias: str) -> Optional[MappingInfo]:
        """Find a record by its terminal-side root; ``None`` when unknown."""

        if not alias:
            return None
        return self._by_alias.get(alias.strip().upper())

    def aliases(self) -> Tuple[str, ...]:
        """Terminal-side roots, longest first."""

        return tuple(
            sorted((info.vendor_root for info in self._entries.values()), key=lambda a: (-len(a), a))
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, root: object) -> bool:
        return isinstance(root, str) and self.lookup(root) is not None

    def __iter__(self) -> Iterator[MappingInfo]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return f"MappingTable(entries={len(self)})"
