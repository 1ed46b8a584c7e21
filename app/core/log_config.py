"""Log line format shared by the API process and the cron jobs."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# asctime is local time, so the offset is printed rather than a UTC "Z".
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
