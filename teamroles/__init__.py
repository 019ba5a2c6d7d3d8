from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from flask import Flask

from .extensions import CONFIGURATION_STORE_KEY, init_extensions
from .logging_config import setup_logging
from .services.configurations import ConfigurationStore, JsonFileBlobStore, MemoryBlobStore, SqlBlobStore
from .services.reveal import DEFAULT_INTERVAL_MS, DEFAULT_TICKS

logger = logging.getLogger(__name__)


def _blob_store(app: Flask):
    backend = (app.config["TEAMROLES_STORAGE"] or "sql").strip().lower()
    if backend == "sql":
        return SqlBlobStore()
    if backend == "file":
        return JsonFileBlobStore(app.config["TEAMROLES_STORAGE_PATH"])
    if backend == "memory":
        return MemoryBlobStore()
    raise ValueError(f"Unknown TEAMROLES_STORAGE backend: {backend!r}")


def create_app(test_config: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///teamroles.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Where saved team configurations live: sql | file | memory
    app.config["TEAMROLES_STORAGE"] = os.environ.get("TEAMROLES_STORAGE", "sql")
    app.config["TEAMROLES_STORAGE_PATH"] = os.environ.get("TEAMROLES_STORAGE_PATH", "saved_teams.json")

    app.config["TEAMROLES_REVEAL_TICKS"] = int(os.environ.get("TEAMROLES_REVEAL_TICKS", DEFAULT_TICKS))
    app.config["TEAMROLES_REVEAL_INTERVAL_MS"] = int(
        os.environ.get("TEAMROLES_REVEAL_INTERVAL_MS", DEFAULT_INTERVAL_MS)
    )
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")

    if test_config:
        app.config.update(test_config)

    setup_logging(app.config["LOG_LEVEL"])

    init_extensions(app)

    app.extensions[CONFIGURATION_STORE_KEY] = ConfigurationStore(_blob_store(app))

    # Blueprints
    from .views.public import public_bp
    from .views.team import team_bp
    from .views.teams import teams_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(team_bp)
    app.register_blueprint(teams_bp)

    from .cli import roles_cli
    app.cli.add_command(roles_cli)

    logger.info("Saved teams stored via %s backend", app.config["TEAMROLES_STORAGE"])
    return app
