from __future__ import annotations

import dataclasses
import json
import logging

import pytest

from tickerlink import SAMPLE_SYMBOL_MAP
from tickerlink.errors import ConfigError
from tickerlink.mapping import MappingTable
from tickerlink.types import SecurityType


def _write_json(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_fixture_table_loads(symbol_table: MappingTable) -> None:
    assert len(symbol_table) == 9
    info = symbol_table.lookup("ZL")
    assert info is not None
    assert info.alias == "BO"
    assert info.vendor_root == "BO"
    assert info.market == "cbot"
    assert info.security_type is SecurityType.FUTURE
    assert info.suffix_tokens == ("COMB", "Comdty")
    assert info.expiry_days["H"] == 13


def test_lookup_is_case_insensitive(symbol_table: MappingTable) -> None:
    assert symbol_table.lookup("zl") is symbol_table.lookup("ZL")
    assert symbol_table.lookup_alias("bo") is symbol_table.lookup("ZL")
    assert "6a" in symbol_table


def test_lookup_by_underlying(symbol_table: MappingTable) -> None:
    assert symbol_table.lookup("EUR") is symbol_table.lookup("EURUSD")


def test_unknown_root_is_absent(symbol_table: MappingTable) -> None:
    assert symbol_table.lookup("QQQ") is None
    assert symbol_table.lookup_alias("QQQ") is None
    assert symbol_table.lookup("") is None
    assert "QQQ" not in symbol_table


def test_alias_defaults_to_key(symbol_table: MappingTable) -> None:
    info = symbol_table.lookup("CL")
    assert info is not None
    assert info.alias is None
    assert symbol_table.lookup_alias("CL") is info


def test_aliases_longest_first(symbol_table: MappingTable) -> None:
    aliases = symbol_table.aliases()
    assert aliases[0] == "BRK/B"
    assert [len(alias) for alias in aliases] == sorted((len(a) for a in aliases), reverse=True)
    assert "C" in aliases


def test_manual_chain_is_tuple(symbol_table: MappingTable) -> None:
    info = symbol_table.lookup("NG")
    assert info is not None
    assert info.chain == ("NGF0 COMB Comdty", "NGG0 COMB Comdty", "NGH0 COMB Comdty")


def test_sample_map_ships_with_package() -> None:
    table = MappingTable.load(SAMPLE_SYMBOL_MAP, required=True)

    assert table.lookup("ZL") is not None
    assert table.lookup_alias("AD") is table.lookup("6A")


def test_missing_file_gives_empty_table(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="tickerlink.mapping")

    table = MappingTable.load(tmp_path / "absent.json")

    assert len(table) == 0
    assert any("mapping_missing" in record.message for record in caplog.records)


def test_missing_file_when_required(tmp_path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        MappingTable.load(tmp_path / "absent.json", required=True)

    assert excinfo.value.path == tmp_path / "absent.json"


def test_unconfigured_source() -> None:
    assert len(MappingTable.load(None)) == 0
    with pytest.raises(ConfigError):
        MappingTable.load("", required=True)


def test_load_logs_entry_count(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tickerlink.mapping")
    path = tmp_path / "map.json"
    _write_json(path, {"ES": {"Underlying": "ES", "SecurityType": "Future", "Market": "CME"}})

    table = MappingTable.load(path)

    assert table.lookup("ES").market == "cme"
    assert any(
        "mapping_loaded" in record.message and "entries=1" in record.message
        for record in caplog.records
    )


def test_yaml_map(tmp_path) -> None:
    path = tmp_path / "map.yaml"
    path.write_text(
        "ZC:\n"
        "  Alias: C\n"
        "  Underlying: ZC\n"
        "  SecurityType: future\n"
        "  Market: cbot\n"
        "  Chain:\n"
        "    - C H0 COMB Comdty\n",
        encoding="utf-8",
    )

    table = MappingTable.load(path)

    assert table.lookup_alias("C").chain == ("C H0 COMB Comdty",)


@pytest.mark.parametrize(
    ("entry", "message"),
    [
        ({"SecurityType": "Future", "Market": "cbot"}, "missing: Underlying"),
        ({"Underlying": "ZL", "SecurityType": "Swap", "Market": "cbot"}, "Unknown security type"),
        ({"Underlying": "ZL", "SecurityType": "Future", "Market": "cbot", "Chain": "ZLH0"}, "Chain"),
        (
            {"Underlying": "ZL", "SecurityType": "Future", "Market": "cbot", "ExpiryDays": {"H": 40}},
            "out of range",
        ),
        ("ZL", "must be an object"),
    ],
)
def test_invalid_entries(tmp_path, entry, message: str) -> None:
    path = tmp_path / "map.json"
    _write_json(path, {"ZL": entry})

    with pytest.raises(ConfigError, match=message) as excinfo:
        MappingTable.load(path)

    assert excinfo.value.path == path


def test_case_insensitive_duplicate_roots(tmp_path) -> None:
    path = tmp_path / "map.json"
    entry = {"Underlying": "ZL", "SecurityType": "Future", "Market": "cbot"}
    _write_json(path, {"ZL": entry, "zl": entry})

    with pytest.raises(ConfigError, match="Duplicate root"):
        MappingTable.load(path)


@pytest.mark.parametrize("payload", [["ZL"], [], False, 0, "ZL"])
def test_document_must_be_object(tmp_path, payload) -> None:
    path = tmp_path / "map.json"
    _write_json(path, payload)

    with pytest.raises(ConfigError, match="object keyed by root"):
        MappingTable.load(path)


def test_records_are_hashable(symbol_table: MappingTable) -> None:
    info = symbol_table.lookup("CL")
    copy = dataclasses.replace(info)

    assert copy == info
    assert hash(copy) == hash(info)
    assert len({info, copy, symbol_table.lookup("ZL")}) == 2


def test_yaml_duplicate_roots_are_rejected(tmp_path) -> None:
    path = tmp_path / "map.yaml"
    path.write_text(
        "ZL:\n  Underlying: ZL\n  SecurityType: Future\n  Market: cbot\n"
        "ZL:\n  Underlying: ZL\n  SecurityType: Future\n  Market: cme\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="duplicate key") as excinfo:
        MappingTable.load(path)

    assert excinfo.value.path == path
