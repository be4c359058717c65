from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Optional, Union

from .audit.sink import AUDIT_LOGGER_NAME

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_FORMAT = "%(asctime)s %(levelname)s %(message)s"

# "adms_attendance" when installed, longer when imported through src.
PACKAGE_LOGGER = __name__.rpartition(".")[0]


def configure_logging(level: Union[str, int] = "INFO", log_dir: Optional[Union[str, Path]] = None) -> None:
    """Console logging always; rotating files when ``log_dir`` is set.

    Audit events go to their own file so they can be retained separately.
    """

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    app_handlers = ["console"]
    audit_handlers = ["console"]

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers["app_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(path / "adms.log"),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers["audit_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "audit",
            "filename": str(path / "audit.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 10,
            "encoding": "utf-8",
        }
        app_handlers.append("app_file")
        audit_handlers.append("audit_file")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
                "audit": {"format": AUDIT_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": handlers,
            "loggers": {
                PACKAGE_LOGGER: {"level": level, "handlers": app_handlers, "propagate": False},
                AUDIT_LOGGER_NAME: {"level": "INFO", "handlers": audit_handlers, "propagate": False},
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
    )
