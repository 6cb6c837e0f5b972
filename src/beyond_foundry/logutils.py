"""
Logging helpers for beyond-foundry.

All modules log through the ``beyond-foundry`` logger or one of its children
(``beyond-foundry.spells``, ``beyond-foundry.items`` ...), so a host
application can tune verbosity with a single ``logging`` call.
"""

import logging

LOGGER_NAME = "beyond-foundry"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str | int | None = None) -> None:
    """Attach a stream handler to the package logger (idempotent).

    Args:
        level: Logging level name ("DEBUG", "INFO", ...) or numeric level.
            Defaults to BEYOND_FOUNDRY_LOG_LEVEL from the settings.
    """
    if level is None:
        from .config import load_settings

        level = load_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)
    if not any(getattr(h, "_beyond_foundry", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
        handler._beyond_foundry = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
