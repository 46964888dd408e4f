"""Unified logger with request_id tracing."""
import logging
import uuid
from contextvars import ContextVar

from config.settings import LOG_LEVEL

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_FORMAT = "[%(asctime)s] [%(request_id)s] %(levelname)s %(name)s: %(message)s"
_factory_installed = False
_level = LOG_LEVEL
_loggers: dict[str, logging.Logger] = {}


def _install_record_factory() -> None:
    # Installed once; chaining it per logger would nest the factories.
    global _factory_installed
    if _factory_installed:
        return
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.request_id = request_id_var.get() or "-"
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    _install_record_factory()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel((level or _level).upper())
        _loggers[name] = logger
    return logger


def set_level(level: str) -> None:
    """Apply the configured level to every component logger, present and future."""
    global _level
    _level = level
    for logger in _loggers.values():
        logger.setLevel(level.upper())


def new_request_id() -> str:
    """Start a new trace id for the current task (one per pulse check)."""
    rid = str(uuid.uuid4())[:8]
    request_id_var.set(rid)
    return rid
