import logging
import os

logger = logging.getLogger("rich_text_resolver")
trace_logger = logging.getLogger("rich_text_resolver.trace")

DEFAULT_LOG_LEVEL = "WARNING"

# Create a custom logging level
DETAIL = 15
logging.addLevelName(DETAIL, "DETAIL")


# Create a custom log method for the "DETAIL" level
def detail(self, message, *args, **kws):
    if self.isEnabledFor(DETAIL):
        self._log(DETAIL, message, args, **kws)


# Add the custom log method to the logging.Logger class
logging.Logger.detail = detail  # type: ignore


def get_logger() -> logging.Logger:
    """Configure the package logger from the `LOG_LEVEL` environment variable.

    An unset or empty `LOG_LEVEL` falls back to `DEFAULT_LOG_LEVEL`. A stream handler is attached
    only once, so calling this repeatedly is harmless.
    """
    level = os.environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)

    return logger
