import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_logger(log_path=None, level=logging.INFO):
    """Package logger with console output and an optional log file."""
    logger = logging.getLogger("seedline")
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)

        if log_path:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    return logger
