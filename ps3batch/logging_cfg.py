"""Centralized logging helpers for ps3batch.

Provide a small helper to create a logger that writes to stdout and, when a
base directory is given, to a log file there. The orchestrator's log-line side
channel is a regular logging handler (``CallbackLogHandler``) that forwards
to a sink bound per context (``bind_log_sink``), so concurrent runs each get
only their own lines.
"""

from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
import threading
import uuid
from pathlib import Path
from typing import Callable, Optional

from ps3batch.config import LOG_FORMAT_ENV


_STD_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_FILENAME = "_PS3BATCH_LOG.txt"

# Console formatter for loggers made by get_logger; configure_logging swaps it
_console_formatter: logging.Formatter = logging.Formatter("%(message)s")


def _is_console(h: logging.Handler) -> bool:
    return isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)


def get_logger(
    name: str = "ps3batch",
    base_dir: Optional[Path] = None,
    level: int = logging.INFO,
    propagate: bool = True,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = propagate

    if not any(_is_console(h) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(_console_formatter)
        logger.addHandler(ch)

    has_file = any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    if base_dir and not has_file:
        base_dir = Path(base_dir)
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(base_dir / LOG_FILENAME), encoding="utf-8")
            fh.setFormatter(logging.Formatter(_STD_FORMAT))
            logger.addHandler(fh)
        except OSError:
            logger.debug("Could not create file handler for logger at %s", base_dir)

    return logger


# Correlation ID support for tracing one run across modules
_cid_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "ps3batch_correlation_id", default=None
)


def set_correlation_id(cid: str | None = None) -> str:
    """Set or create and set a correlation id for the current context.

    Returns the correlation id string.
    """
    if cid is None:
        cid = uuid.uuid4().hex
    _cid_var.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _cid_var.get()


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter that includes correlation id when available."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        cid = get_correlation_id()
        if cid:
            payload["correlation_id"] = cid
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _resolve_mode(env: str) -> str:
    chosen = env.lower()
    if chosen in ("json", "human"):
        return chosen
    # auto: prefer human when interactive
    try:
        return "human" if sys.stdout.isatty() else "json"
    except (AttributeError, ValueError):
        return "json"


def configure_logging(env: Optional[str] = "auto", level: int = logging.INFO):
    """Configure the root logger.

    env: 'auto' (default) | 'json' | 'human'
    - 'auto' chooses human-readable when stdout is a TTY, otherwise JSON.
      ``PS3BATCH_LOG_FORMAT`` is consulted when env is None or 'auto'.
    - 'json' forces JSON output.
    - 'human' forces a readable formatter.

    The last call wins. The chosen formatter also goes to the console
    handlers of non-propagating ``ps3batch`` loggers (the batch logger), which
    never reach the root handler.

    Returns the root logger.
    """
    global _console_formatter

    if env in (None, "auto"):
        env = os.getenv(LOG_FORMAT_ENV) or "auto"
    mode = _resolve_mode(env)

    if mode == "json":
        formatter: logging.Formatter = JsonFormatter()
        _console_formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        _console_formatter = logging.Formatter("%(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    sh = next(
        (h for h in root_logger.handlers if getattr(h, "name", None) == "ps3batch_console"),
        None,
    )
    if sh is None:
        sh = logging.StreamHandler()
        sh.name = "ps3batch_console"
        root_logger.addHandler(sh)
    sh.setFormatter(formatter)

    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger) or logger.propagate:
            continue
        if name == "ps3batch" or name.startswith("ps3batch."):
            for h in logger.handlers:
                if _is_console(h):
                    h.setFormatter(_console_formatter)

    return root_logger


class CallbackLogHandler(logging.Handler):
    """Logging handler that hands each formatted record to a callback.

    Errors raised by the callback go through ``handleError`` so a broken
    consumer cannot abort a run.
    """

    def __init__(
        self,
        log_callback: Callable[[str], None],
        formatter: logging.Formatter | None = None,
    ):
        super().__init__()
        self.log_callback = log_callback
        self.setFormatter(formatter or logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log_callback(self.format(record))
        except Exception:
            self.handleError(record)


def attach_log_callback(
    logger: logging.Logger, log_callback: Callable[[str], None]
) -> CallbackLogHandler:
    """Attach (idempotently) a CallbackLogHandler for ``log_callback``."""
    for h in logger.handlers:
        if (
            isinstance(h, CallbackLogHandler)
            and getattr(h, "log_callback", None) == log_callback
        ):
            return h
    handler = CallbackLogHandler(log_callback)
    logger.addHandler(handler)
    return handler


# Lines from a bound logger go to the sink set in the emitting context
_sink_lock = threading.Lock()
_sink_var: contextvars.ContextVar[Optional[Callable[[str], None]]] = contextvars.ContextVar(
    "ps3batch_log_sink", default=None
)


def _dispatch_to_sink(line: str) -> None:
    sink = _sink_var.get()
    if sink is not None:
        sink(line)


def bind_log_sink(logger: logging.Logger, sink: Callable[[str], None]) -> contextvars.Token:
    """Send ``logger``'s lines emitted in the current context to ``sink``.

    Returns the token to pass to ``unbind_log_sink``.
    """
    with _sink_lock:
        attach_log_callback(logger, _dispatch_to_sink)
    return _sink_var.set(sink)


def unbind_log_sink(token: contextvars.Token) -> None:
    _sink_var.reset(token)
