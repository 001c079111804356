import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# The driver logs every command and heartbeat at DEBUG.
QUIET_LOGGERS = ("pymongo",)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger; a no-op if it already has handlers."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
