"""
Structured JSON logging.

``logger.info("[Webhook] Event received", call_id=...)`` emits one JSON
object per line; keyword arguments become top-level fields.
"""

import inspect
import logging
import os

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "fusioncaller"

# LogRecord attributes that an ``extra`` key must not overwrite
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


class Logger(logging.LoggerAdapter):
    """Process-wide adapter over the ``fusioncaller`` logger."""

    _instance = None
    _initialized = False

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if Logger._initialized:
            return

        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(message)s",
            rename_fields={"asctime": "@timestamp", "levelname": "log_level"},
            static_fields={"service": SERVICE_NAME},
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        base = logging.getLogger(SERVICE_NAME)
        base.setLevel(_level_from_env())
        base.addHandler(handler)
        base.propagate = False

        super().__init__(base)
        Logger._initialized = True

    @staticmethod
    def _source() -> str:
        # Skip this helper and the error()/exception() wrapper
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is None:
            return "unknown:0"
        return f"{caller.f_code.co_filename}:{caller.f_lineno}"

    def error(self, msg: str, *args, **kwargs) -> None:
        """ERROR with the calling file and line attached as ``source``."""
        kwargs["source"] = self._source()
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, exc_info: bool = True, **kwargs) -> None:
        kwargs["source"] = self._source()
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        passthrough = {
            key: kwargs.pop(key)
            for key in ("exc_info", "stack_info", "stacklevel")
            if key in kwargs
        }
        if kwargs:
            # A field named like a LogRecord attribute would make logging raise
            passthrough["extra"] = {
                (f"field_{key}" if key in _RESERVED_ATTRS else key): value
                for key, value in kwargs.items()
            }
        return msg, passthrough


logger = Logger()
