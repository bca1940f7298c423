from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.constants import DEFAULT_REFERENCE_TZ, DEFAULT_TEAM_LOG_LIMIT
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .reporting.controller import register as register_reporting
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users

logger = logging.getLogger("team_tracker")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Helpful startup info to avoid "connected but no tables" confusion.
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        reference_tz=getattr(settings, "REFERENCE_TZ", DEFAULT_REFERENCE_TZ),
        team_log_limit=int(getattr(settings, "TEAM_LOG_LIMIT", DEFAULT_TEAM_LOG_LIMIT)),
    )
    app.extensions["team_tracker"] = container

    register_users(app, container)
    register_sessions(app, container)
    register_reporting(app, container)

    return app
