import logging
from typing import Optional

from rich.logging import RichHandler


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(market)s | %(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"


class MarketFilter(logging.Filter):
    """Ensures %(market)s is always present in log records to avoid KeyError in format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "market"):
            record.market = "-"
        return True


def setup_logging(level: int = logging.INFO, rich_tracebacks: bool = True, log_file: Optional[str] = None) -> None:
    """Initialize rich-based logging, optionally mirrored to a plain log file."""
    handler = RichHandler(rich_tracebacks=rich_tracebacks, markup=False)
    handler.addFilter(MarketFilter())
    handlers = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.addFilter(MarketFilter())
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FMT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FMT,
        handlers=handlers,
        force=True,
    )


def level_from_name(name: str) -> int:
    """Map a level name to its numeric value, defaulting to INFO."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO
