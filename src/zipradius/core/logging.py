"""
Logging configuration.

We use a YAML logging config (`src/zipradius/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `ZIPRADIUS_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from zipradius.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system from the packaged YAML config + settings.

    `level` (e.g. from a CLI `--log-level` flag) wins over the configured level.
    """
    settings = get_settings()
    config = dict(get_logging_config())

    effective = (level or settings.app.log_level).upper()
    config["root"] = {**config.get("root", {}), "level": effective}
    handlers = {}
    for name, handler in config.get("handlers", {}).items():
        if isinstance(handler, dict) and "level" in handler:
            handler = {**handler, "level": effective}
        handlers[name] = handler
    config["handlers"] = handlers

    logging.config.dictConfig(config)
