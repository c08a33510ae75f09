from __future__ import annotations

import logging
from logging import Formatter, Handler, StreamHandler
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

__all__ = ["setup_logging", "detach_handler", "LOG_FORMAT", "APP_LOG_FILE"]

PROJECT_ROOT = Path(__file__).resolve().parents[1]
APP_LOG_FILE = PROJECT_ROOT / "logs" / "tickerlink.log"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_LOGGER = logging.getLogger(__name__)
_configured = False


def _resolve_level(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        named = getattr(logging, level.upper(), None)
        if isinstance(named, int):
            return named
        try:
            return int(level)
        except ValueError:
            return logging.INFO
    return logging.INFO


def _ensure_dir(path: Path) -> Path:
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"expected directory path={path} but found file")
        return path
    path.mkdir(parents=True, exist_ok=True)
    _LOGGER.info("created dir path=%s component=logging", path.resolve())
    return path


def setup_logging(
    level: Union[str, int] = "INFO",
    *,
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """Configure the ``tickerlink`` logger tree once; later calls only adjust levels."""

    global _configured
    resolved = _resolve_level(level)
    package_logger = logging.getLogger("tickerlink")
    if not _configured:
        target = Path(log_file) if log_file is not None else APP_LOG_FILE
        _ensure_dir(target.parent)
        package_logger.addHandler(_build_rotating_handler(target, level=resolved))
        if console:
            stream_handler = StreamHandler()
            stream_handler.setFormatter(Formatter(LOG_FORMAT))
            package_logger.addHandler(stream_handler)
        _configured = True
    package_logger.setLevel(resolved)
    for handler in package_logger.handlers:
        handler.setLevel(resolved)


def detach_handler(handler: Handler) -> None:
    """Remove and close a previously attached handler."""
    package_logger = logging.getLogger("tickerlink")
    package_logger.removeHandler(handler)
    handler.close()


def _build_rotating_handler(path: Path, level: Optional[int] = None) -> Handler:
    handler = RotatingFileHandler(
        path,
        mode="a",
        encoding="utf-8",
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
    )
    handler.setFormatter(Formatter(LOG_FORMAT))
    if level is not None:
        handler.setLevel(level)
    return handler
