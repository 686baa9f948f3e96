"""Root logger configuration."""

import logging

from tradejournal.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None):
    """Configure the root logger once; later calls only adjust the level."""
    level_name = (level or settings.log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level_name, format=LOG_FORMAT)
    root.setLevel(level_name)
    # uvicorn's access log duplicates the API's own logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
