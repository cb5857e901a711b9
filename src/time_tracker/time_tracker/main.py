from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .auth.controller import register as register_auth
from .container import Container, build_container
from .core.enums import AuthEvent
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .hr.controller import register as register_hr
from .projects.controller import register as register_projects
from .reports.controller import register as register_reports
from .routing.controller import on_auth_event
from .routing.controller import register as register_routing
from .settings.controller import register as register_settings
from .tasks.controller import register as register_tasks
from .time_entries.controller import register as register_time_entries
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[3]


def load_settings(settings_module: Optional[str] = None) -> dict:
    module = importlib.import_module(settings_module or get_settings_module())
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _audit_auth_event(event: AuthEvent, auth) -> None:
    who = auth.email if auth is not None else "-"
    logger.info("auth event %s for %s", event.value, who)


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Tests pass a ready ``container`` so no database is touched.
    """
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings = load_settings(settings_module)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))
    configure_logging(app.config["DEBUG"])

    if container is None:
        db_config = settings["DB_CONFIG"]
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module or get_settings_module(),
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if settings.get("AUTO_INIT_DB"):
            apply_schema(db_config, schema_path=ROOT_DIR / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if settings.get("AUTO_SEED_DB"):
            apply_seed_sql(db_config, seed_path=ROOT_DIR / "database" / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    for unsubscribe in (
        container.auth_events.subscribe(on_auth_event),
        container.auth_events.subscribe(_audit_auth_event),
    ):
        atexit.register(unsubscribe)

    register_routing(app, container)
    register_auth(app, container)
    register_time_entries(app, container)
    register_dashboard(app, container)
    register_projects(app, container)
    register_tasks(app, container)
    register_users(app, container)
    register_settings(app, container)
    register_reports(app, container)
    register_hr(app, container)

    app.extensions["time_tracker"] = container
    return app
