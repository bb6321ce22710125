"""Logging utility.

Centralized, idempotent logging setup for the water-balance analytics core.

Primary entry points:
1. get_logger(): Base singleton project logger (no function context).
2. setup_logger(function_name, ...): Returns a LoggerAdapter injecting a logical
   function / module name (func_ctx) into each record.

Features:
- Emoji + (optional ANSI color) console output.
- Optional size-based rotating file handler (UTF-8), attached only when a log
  file is requested explicitly or through the environment.
- Safe argument handling (avoids '%'-format crashes when callers pass comma args).
- Idempotent initialization (no duplicate handlers, no propagation to root).

Environment variables:
- WATERBALANCE_LOG_LEVEL, WATERBALANCE_LOG_FILE
- NO_COLOR: disables ANSI colors.
- NO_EMOJI: suppresses emoji while retaining spacing.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
import sys
from typing import Any

# --- Constants ---
_DEFAULT_LOGGER_NAME = "WaterBalance"
_ROTATE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
_ROTATE_BACKUP_COUNT = 5

_LEVEL_EMOJIS: dict[int, str] = {
    logging.DEBUG: "🐞  ",
    logging.INFO: "💧  ",
    logging.WARNING: "⚠️  ",
    logging.ERROR: "❌  ",
    logging.CRITICAL: "🚨  ",
}

_LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\x1b[38;5;244m",  # Grey
    logging.INFO: "\x1b[38;5;39m",  # Blue
    logging.WARNING: "\x1b[38;5;214m",  # Orange
    logging.ERROR: "\x1b[38;5;196m",  # Red
    logging.CRITICAL: "\x1b[48;5;196;38;5;231m",  # White on Red
}
_RESET_COLOR = "\x1b[0m"


class EmojiFormatter(logging.Formatter):
    """Log formatter that injects emojis, function context and optional color."""

    def __init__(self, *, use_color: bool = True, use_emoji: bool = True):
        """Initializes the formatter.

        Args:
            use_color: If True, applies ANSI color codes to the output.
            use_emoji: If True, includes emojis in the output.
        """
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(func_ctx)s | %(emoji)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_color = use_color
        self.use_emoji = use_emoji

    def format(self, record: logging.LogRecord) -> str:
        """Formats the record, adding an emoji and optional color."""
        if not hasattr(record, "func_ctx"):
            record.func_ctx = "-"  # type: ignore[attr-defined]

        # logger.info("Text:", value) style calls
        if record.args:
            try:
                _ = record.msg % record.args
            except (TypeError, ValueError):
                record.msg = " ".join([str(record.msg), *(str(a) for a in record.args)])
                record.args = ()

        record.emoji = _LEVEL_EMOJIS.get(record.levelno, "➡️  ") if self.use_emoji else ""
        formatted_message = super().format(record)

        if self.use_color and (color := _LEVEL_COLORS.get(record.levelno)):
            return f"{color}{formatted_message}{_RESET_COLOR}"
        return formatted_message


def _determine_log_level(explicit_level: int | str | None) -> int:
    """Determines the log level from explicit, environment, or default settings."""
    if isinstance(explicit_level, int):
        return explicit_level
    level_str = str(explicit_level or os.getenv("WATERBALANCE_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_str, logging.INFO)


def get_logger(
    name: str = _DEFAULT_LOGGER_NAME, *, level: int | str | None = None
) -> logging.Logger:
    """Return the singleton project logger, configuring it on first use.

    Args:
        name: Logical name for the logger. Library code should use the default.
        level: Optional override for the log level (e.g. "DEBUG" or logging.DEBUG).
            If provided, it updates the level even on subsequent calls.

    Returns:
        A configured `logging.Logger`.
    """
    logger = logging.getLogger(name)
    log_level = _determine_log_level(level)

    if getattr(logger, "_waterbalance_configured", False):
        if level is not None:
            logger.setLevel(log_level)
        return logger

    logger.setLevel(log_level)
    logger.propagate = False

    use_color = sys.stdout.isatty() and os.getenv("NO_COLOR") is None
    use_emoji = os.getenv("NO_EMOJI") is None

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(EmojiFormatter(use_color=use_color, use_emoji=use_emoji))
        logger.addHandler(stream_handler)

    logger._waterbalance_configured = True  # type: ignore[attr-defined]
    logger.debug(
        "Logger '%s' initialized at level %s (color=%s, emoji=%s).",
        name,
        logging.getLevelName(log_level),
        use_color,
        use_emoji,
    )
    return logger


class _FunctionContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that injects function context via the `func_ctx` attribute."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Adds the adapter's `func_ctx` to the record extras."""
        if self.extra is not None:
            kwargs.setdefault("extra", {})["func_ctx"] = self.extra.get("func_ctx", "-")
        return msg, kwargs


def _attach_file_handler(
    base_logger: logging.Logger, log_file: str | Path, max_bytes: int, backup_count: int
) -> None:
    """Attach a rotating file handler once per file path."""
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        base_logger.exception("Failed to create log directory for %s", log_file)
        return

    abs_log_path = str(Path(log_file).resolve())
    if any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == abs_log_path
        for h in base_logger.handlers
    ):
        return

    try:
        rfh = RotatingFileHandler(
            abs_log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError:
        base_logger.exception("Could not add rotating file handler for %s", abs_log_path)
        return

    # File logs: no color / emoji for portability
    rfh.setFormatter(EmojiFormatter(use_color=False, use_emoji=False))
    base_logger.addHandler(rfh)
    base_logger.debug(
        "Added rotating file handler for %s (max=%d bytes, backups=%d)",
        abs_log_path,
        max_bytes,
        backup_count,
    )


def setup_logger(
    function_name: str,
    *,
    level: int | str | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
    log_file: str | Path | None = None,
    max_bytes: int = _ROTATE_MAX_BYTES,
    backup_count: int = _ROTATE_BACKUP_COUNT,
) -> logging.LoggerAdapter:
    """Return a logger adapter bound to a specific function or module.

    The adapter injects ``function_name`` via the ``func_ctx`` field for every
    emitted record. A rotating file handler is attached only when ``log_file`` is
    given or ``WATERBALANCE_LOG_FILE`` is set; filesystem failures are logged and
    suppressed so analytics keep running.

    Args:
        function_name: Descriptive name of the current module or task.
        level: Optional log level override.
        logger_name: Base logger name, shared project-wide.
        log_file: Explicit path for the log file. Overrides the environment.
        max_bytes: Maximum size in bytes before the file is rotated.
        backup_count: Number of rotated files to keep.

    Returns:
        A `logging.LoggerAdapter` that injects `func_ctx` into log records.
    """
    base_logger = get_logger(logger_name, level=level)

    effective_log_file = log_file or os.getenv("WATERBALANCE_LOG_FILE")
    if effective_log_file:
        _attach_file_handler(base_logger, effective_log_file, max_bytes, backup_count)

    return _FunctionContextAdapter(base_logger, {"func_ctx": function_name})


__all__ = ["get_logger", "setup_logger"]
