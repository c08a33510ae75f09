# tickerlink/config.py
# =============================================================================
# Purpose:
#   Centralize runtime configuration for the symbol mapper. Values typically
#   come from a .env file, but sane defaults let the mapper run without setup.
#
# Summary:
#   - Defines a Settings dataclass for strongly-typed config
#   - Loads environment variables via python-dotenv
#   - Exposes load_settings() for consumers (mapper factory / tests)
#
# Design Notes:
#   - Precedence is explicit overrides > environment > defaults.
# =============================================================================
from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Literal, Mapping, Tuple, overload

from dotenv import load_dotenv

_LOGGER = logging.getLogger("tickerlink.config")

DEFAULT_SYMBOL_MAP_FILE = "symbol-map.json"


@dataclass
class Settings:
    """Strongly-typed container for config values."""

    symbol_map_file: str = DEFAULT_SYMBOL_MAP_FILE
    symbol_map_required: bool = False
    default_equity_market: str = "usa"
    default_forex_market: str = "fxcm"
    default_future_market: str = "usa"
    default_quote_currency: str = "USD"
    year_horizon: int = 20
    log_level: str = "INFO"


@dataclass(frozen=True)
class _FieldSpec:
    env: str
    default: Any
    coerce: Callable[[Any, Any], Tuple[Any, bool]]


_TRUE_LITERALS = {"1", "true", "t", "yes", "y", "on"}
_FALSE_LITERALS = {"0", "false", "f", "no", "n", "off"}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _pick_precedence(
    cli_value: Any, env_value: Any, default_value: Any
) -> Tuple[Any, str]:
    if not _is_missing(cli_value):
        return cli_value, "cli"
    if not _is_missing(env_value):
        return env_value, "env"
    return default_value, "default"


def _str_coercer(
    *, lower: bool = False, upper: bool = False
) -> Callable[[Any, Any], Tuple[str, bool]]:
    def _inner(value: Any, default: Any) -> Tuple[str, bool]:
        if value is None:
            return default, False
        text = str(value).strip()
        if text == "":
            return default, False
        if lower:
            text = text.lower()
        if upper:
            text = text.upper()
        return text, True

    return _inner


def _bool_coercer(value: Any, default: Any) -> Tuple[bool, bool]:
    if isinstance(value, bool):
        return value, True
    if value is None:
        return bool(default), False
    token = str(value).strip().lower()
    if token in _TRUE_LITERALS:
        return True, True
    if token in _FALSE_LITERALS:
        return False, True
    return bool(default), False


def _positive_int_coercer(value: Any, default: Any) -> Tuple[int, bool]:
    if value is None:
        return int(default), False
    token = value
    if isinstance(token, str):
        token = token.strip()
        if token == "":
            return int(default), False
    try:
        parsed = int(token)
    except (TypeError, ValueError):
        return int(default), False
    if parsed <= 0:
        return int(default), False
    return parsed, True


def _currency_coercer(value: Any, default: Any) -> Tuple[str, bool]:
    text, ok = _str_coercer(upper=True)(value, default)
    if ok and not (len(text) == 3 and text.isalpha()):
        return default, False
    return text, ok


_FIELD_SPECS: Dict[str, _FieldSpec] = {
    "symbol_map_file": _FieldSpec(
        "TICKERLINK_SYMBOL_MAP_FILE", DEFAULT_SYMBOL_MAP_FILE, _str_coercer()
    ),
    "symbol_map_required": _FieldSpec(
        "TICKERLINK_SYMBOL_MAP_REQUIRED", False, _bool_coercer
    ),
    "default_equity_market": _FieldSpec(
        "TICKERLINK_EQUITY_MARKET", "usa", _str_coercer(lower=True)
    ),
    "default_forex_market": _FieldSpec(
        "TICKERLINK_FOREX_MARKET", "fxcm", _str_coercer(lower=True)
    ),
    "default_future_market": _FieldSpec(
        "TICKERLINK_FUTURE_MARKET", "usa", _str_coercer(lower=True)
    ),
    "default_quote_currency": _FieldSpec(
        "TICKERLINK_QUOTE_CURRENCY", "USD", _currency_coercer
    ),
    "year_horizon": _FieldSpec("TICKERLINK_YEAR_HORIZON", 20, _positive_int_coercer),
    "log_level": _FieldSpec("LOG_LEVEL", "INFO", _str_coercer(upper=True)),
}


@overload
def load_settings(
    *,
    cli_overrides: Mapping[str, Any] | None = None,
    env_policy: Mapping[str, bool] | None = None,
    include_sources: Literal[True],
    logger: logging.Logger | None = None,
    base_settings: Settings | None = None,
) -> Tuple[Settings, Dict[str, str]]: ...


@overload
def load_settings(
    *,
    cli_overrides: Mapping[str, Any] | None = None,
    env_policy: Mapping[str, bool] | None = None,
    include_sources: Literal[False] = False,
    logger: logging.Logger | None = None,
    base_settings: Settings | None = None,
) -> Settings: ...


def load_settings(
    *,
    cli_overrides: Mapping[str, Any] | None = None,
    env_policy: Mapping[str, bool] | None = None,
    include_sources: bool = False,
    logger: logging.Logger | None = None,
    base_settings: Settings | None = None,
) -> Settings | Tuple[Settings, Dict[str, str]]:
    """Resolve settings with deterministic precedence and logging.

    The precedence order is explicit overrides > environment (when permitted)
    > defaults. When ``include_sources`` is true, the function returns a tuple
    of ``(Settings, sources)`` where *sources* maps field names to
    ``{"cli" | "env" | "default"}`` to aid diagnostics.
    """

    load_dotenv()

    overrides = {
        key: value for key, value in (cli_overrides or {}).items() if value is not None
    }
    env_policy_map = {key: bool(value) for key, value in (env_policy or {}).items()}
    base_defaults: Dict[str, Any] = (
        asdict(base_settings) if base_settings is not None else {}
    )

    log = logger or _LOGGER
    resolved: Dict[str, Any] = {}
    sources: Dict[str, str] = {}

    for field_name, spec in _FIELD_SPECS.items():
        default_value = base_defaults.get(field_name, spec.default)
        cli_value = overrides.get(field_name)
        allow_env = env_policy_map.get(field_name, True)
        env_value = os.getenv(spec.env) if allow_env else None

        raw_value, source = _pick_precedence(cli_value, env_value, default_value)
        coerced, ok = spec.coerce(raw_value, default_value)
        if not ok:
            if source != "default":
                log.warning(
                    "config_invalid_value key=%s source=%s fallback=%s",
                    field_name,
                    source,
                    default_value,
                )
            coerced = default_value
            source = "default"

        log.info(
            "config_resolved key=%s value=%s source=%s", field_name, coerced, source
        )

        resolved[field_name] = coerced
        sources[field_name] = source

    settings = Settings(**resolved)
    if include_sources:
        return settings, sources
    return settings
