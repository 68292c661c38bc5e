from __future__ import annotations

import logging
import sys

from pythonjsonlogger import jsonlogger

# Driver/server loggers that are too chatty at INFO for a per-request service.
QUIET_LOGGERS = ("pymongo", "motor", "uvicorn.access")


def setup_json_logging(level: str, service_name: str = "phonebook") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        static_fields={"service": service_name},
    )
    handler.setFormatter(formatter)

    # reset default handlers
    root.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
