# vetms/logging_config.py

import logging
from typing import Optional

from vetms.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
