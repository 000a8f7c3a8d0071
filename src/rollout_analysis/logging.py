from __future__ import annotations

import logging

from rollout_analysis.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
PACKAGE_LOGGER = "rollout_analysis"


def configure_logging(settings: LoggingConfig | None = None) -> None:
    level = (settings or LoggingConfig()).level
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
