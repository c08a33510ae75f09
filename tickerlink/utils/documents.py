"""Readers for the symbol map file.

JSON documents may carry ``//`` line comments and ``/* */`` block comments;
they are stripped before parsing. YAML documents use a safe loader that also
rejects repeated keys. Both formats treat a duplicate key as a config error.
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, List, Tuple

import yaml

from tickerlink.errors import ConfigError

__all__ = ["strip_json_comments", "parse_json_text", "parse_yaml_text", "read_document"]

_YAML_SUFFIXES = {".yaml", ".yml"}
_YAML_MERGE_TAG = "tag:yaml.org,2002:merge"

# String literals are matched first so comment markers inside them survive.
_COMMENT_PATTERN = re.compile(
    r'("(?:\\.|[^"\\])*")|(//[^\r\n]*)|(/\*.*?\*/)',
    re.DOTALL,
)


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""

    def _replace(match: re.Match[str]) -> str:
        literal = match.group(1)
        if literal is not None:
            return literal
        if match.group(3) is not None:
            return " "
        return ""

    return _COMMENT_PATTERN.sub(_replace, text)


def _reject_duplicates(pairs: List[Tuple[str, Any]]) -> dict:
    payload: dict = {}
    for key, value in pairs:
        if key in payload:
            raise ConfigError(f"Duplicate key in symbol map: {key!r}")
        payload[key] = value
    return payload


def parse_json_text(text: str, *, path: Path | None = None) -> Any:
    """Parse comment-tolerant JSON; blank documents yield ``None``."""

    cleaned = strip_json_comments(text)
    if not cleaned.strip():
        return None
    try:
        return json.loads(cleaned, object_pairs_hook=_reject_duplicates)
    except json.JSONDecodeError as exc:
        where = f" in {path}" if path is not None else ""
        raise ConfigError(f"Invalid JSON symbol map{where}: {exc}", path=path) from exc


class _UniqueKeySafeLoader(yaml.SafeLoader):
    """Safe loader that rejects repeated keys within one mapping."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == _YAML_MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def parse_yaml_text(text: str, *, path: Path | None = None) -> Any:
    try:
        return yaml.load(text, Loader=_UniqueKeySafeLoader)
    except yaml.YAMLError as exc:
        where = f" in {path}" if path is not None else ""
        raise ConfigError(f"Invalid YAML symbol map{where}: {exc}", path=path) from exc


def read_document(path: Path) -> Any:
    """Read and parse *path*, choosing the parser from its suffix.

    Returns ``None`` when the file does not exist so callers can decide
    whether a missing map is fatal.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unable to read symbol map: {path}", path=path) from exc
    if path.suffix.lower() in _YAML_SUFFIXES:
        return parse_yaml_text(text, path=path)
    return parse_json_text(text, path=path)
