import logging, sys, os

# Third-party loggers that are chatty at DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "passlib")

def setup_logging(level: int | None = None):
    logger = logging.getLogger("goldnexus")
    if logger.handlers:
        return logger
    if level is None:
        level = logging.DEBUG if os.getenv("ENV", "dev") == "dev" else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
