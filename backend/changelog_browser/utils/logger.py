import logging
import os

_FORMAT = "%(levelname)-8s %(asctime)s %(filename)20s:%(lineno)-4d: %(message)s"
_DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"


def get_log_level_from_str(log_level_str: str | None = None) -> int:
    log_level_dict = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
        "NOTSET": logging.NOTSET,
    }
    if log_level_str is None:
        log_level_str = os.environ.get("LOG_LEVEL") or "info"
    return log_level_dict.get(log_level_str.upper(), logging.INFO)


def setup_logger(
    name: str = "changelog_browser",
    log_level: int | None = None,
) -> logging.Logger:
    """Return a logger with a single stream handler attached.

    Repeated calls with the same name reuse the handler that was attached the
    first time, so module-level `logger = setup_logger()` is safe everywhere.
    """
    logger = logging.getLogger(name)

    if log_level is None:
        log_level = get_log_level_from_str()
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
