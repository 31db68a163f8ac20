import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "fakeg", level: int = logging.INFO) -> logging.Logger:
    """Return the named logger with a single stream handler attached.

    Calling it again with the same name only updates the level.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(level)
    return log


def set_debug(enabled: bool) -> None:
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


logger = setup_logger()
