from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .logging_config import configure_logging

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .devices.controller import register as register_devices
from .ingestion.controller import register as register_ingestion
from .ingestion.factory import IngestionSettings
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against pre-built (e.g. in-memory) repositories;
    otherwise the MySQL container is built from the active settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY", None)
    if not app.secret_key:
        raise RuntimeError(f"SECRET_KEY is not set ({settings_module})")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["EXPOSE_ERRORS"] = bool(getattr(settings, "EXPOSE_ERRORS", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", None))

    if getattr(settings, "TRUST_PROXY", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    ingestion_settings = IngestionSettings.from_settings(settings)
    if ingestion_settings.ip_whitelist_enabled and not ingestion_settings.allowed_ips:
        logger.warning("ADMS IP allow-list is enabled but empty; only loopback (if allowed) can push")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("demo devices seeded")

        container = build_container(db_config=db_config, ingestion_settings=ingestion_settings)

    app.extensions["adms_container"] = container

    register_ingestion(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_devices(app, container)

    return app
