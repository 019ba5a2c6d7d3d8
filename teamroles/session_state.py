from __future__ import annotations

from flask import current_app, session

from .extensions import CONFIGURATION_STORE_KEY
from .roster import Workspace
from .services.configurations import ConfigurationStore

WORKSPACE_SESSION_KEY = "workspace"


def current_workspace() -> Workspace:
    """The live participants/roles of this browser session."""
    return Workspace.from_dict(session.get(WORKSPACE_SESSION_KEY))


def store_workspace(workspace: Workspace) -> None:
    session[WORKSPACE_SESSION_KEY] = workspace.to_dict()
    session.modified = True


def configuration_store() -> ConfigurationStore:
    return current_app.extensions[CONFIGURATION_STORE_KEY]


def reveal_settings() -> tuple[int, int]:
    return (
        int(current_app.config["TEAMROLES_REVEAL_TICKS"]),
        int(current_app.config["TEAMROLES_REVEAL_INTERVAL_MS"]),
    )
