import inspect
import logging
import os

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "call_forwarding"


def _caller_location(depth: int = 2) -> str:
    """Return "file:line" for the frame `depth` levels above this helper."""
    frame = inspect.currentframe()
    for _ in range(depth):
        if frame is None:
            break
        frame = frame.f_back
    if frame is None:
        return "unknown:0"
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"


class Logger(logging.LoggerAdapter):
    """Process-wide JSON logger.

    Keyword arguments passed to the logging methods are emitted as structured
    fields next to the message, e.g. ``logger.info("Patched", target="self")``.
    """

    _instance = None
    _initialized = False

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if Logger._initialized:
            return

        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
        log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(message)s",
            rename_fields={"asctime": "@timestamp", "levelname": "log_level"},
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        base_logger = logging.getLogger(LOGGER_NAME)
        base_logger.setLevel(log_level)
        base_logger.addHandler(handler)

        super().__init__(base_logger)
        Logger._initialized = True

    def error(self, msg: str, *args: tuple, **kwargs: dict) -> None:
        """Log at ERROR with the caller's file and line attached."""
        kwargs["file"] = _caller_location()
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(
        self, msg: str, *args: tuple, exc_info: bool = True, **kwargs: dict
    ) -> None:
        """Log at ERROR with traceback and the caller's file and line attached."""
        kwargs["file"] = _caller_location()
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        # Everything that is not a logging keyword goes into `extra`,
        # which the JSON formatter renders as top-level fields.
        passthrough = {}
        for key in ("exc_info", "stack_info", "stacklevel"):
            value = kwargs.pop(key, None)
            if value is not None:
                passthrough[key] = value
        if kwargs:
            passthrough["extra"] = kwargs
        return msg, passthrough


logger = Logger()
logger.debug(
    "Logging configured",
    effective_level=logging.getLevelName(logger.logger.getEffectiveLevel()),
)
