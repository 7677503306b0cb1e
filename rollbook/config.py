"""Runtime settings resolved from arguments and ``ROLLBOOK_*`` environment variables."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite:///rollbook.db"
DEFAULT_PHOTO_URL_TEMPLATE = "https://gietuerp.in/StudentDocuments/{roll_number}/{roll_number}.JPG"

_LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

_HANDLER = logging.StreamHandler()
_HANDLER.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))


@dataclass
class Settings:
    """Application settings shared by the API and the command line tools."""

    database_url: str = DEFAULT_DATABASE_URL
    batch_size: int = 50
    photo_url_template: str = DEFAULT_PHOTO_URL_TEMPLATE
    history_size: int = 5
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}.")
    return value


def load_settings(
    *,
    database_url: Optional[str] = None,
    batch_size: Optional[int] = None,
    photo_url_template: Optional[str] = None,
    history_size: Optional[int] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Build :class:`Settings`; explicit arguments win over the environment."""

    return Settings(
        database_url=database_url or os.getenv("ROLLBOOK_DATABASE_URL") or DEFAULT_DATABASE_URL,
        batch_size=batch_size or _env_int("ROLLBOOK_BATCH_SIZE", 50),
        photo_url_template=(
            photo_url_template or os.getenv("ROLLBOOK_PHOTO_URL_TEMPLATE") or DEFAULT_PHOTO_URL_TEMPLATE
        ),
        history_size=history_size or _env_int("ROLLBOOK_HISTORY_SIZE", 5),
        log_level=(log_level or os.getenv("ROLLBOOK_LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``rollbook`` logger hierarchy."""

    logger = logging.getLogger("rollbook")
    logger.setLevel(level.upper())
    if _HANDLER not in logger.handlers:
        logger.addHandler(_HANDLER)


__all__ = ["Settings", "configure_logging", "load_settings"]
