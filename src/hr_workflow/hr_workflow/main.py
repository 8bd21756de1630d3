from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import TOKEN_VERIFIER_KEY, register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS, DEFAULT_TOKEN_SALT
from .database.bootstrap import apply_schema, list_tables
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .recruitment.controller import register as register_recruitment
from .reports.controller import register as register_reports
from .resignations.controller import register as register_resignations

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing ``container`` skips database setup entirely (tests wire one over
    in-memory repositories).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            token_salt=getattr(settings, "TOKEN_SALT", DEFAULT_TOKEN_SALT),
            token_max_age=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS)),
        )

    app.extensions[TOKEN_VERIFIER_KEY] = container.tokens
    register_error_handlers(app)

    register_reports(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_resignations(app, container)
    register_recruitment(app, container)

    return app
