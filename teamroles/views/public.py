from __future__ import annotations

from flask import Blueprint, render_template
from flask.views import MethodView

from ..session_state import configuration_store, current_workspace, reveal_settings


public_bp = Blueprint("public", __name__)


class IndexView(MethodView):
    def get(self):
        workspace = current_workspace()
        _, interval_ms = reveal_settings()
        return render_template(
            "index.html",
            participants=workspace.participants.items,
            roles=workspace.roles.items,
            show_results=workspace.show_results,
            saved_teams=configuration_store().list(),
            reveal_interval_ms=interval_ms,
        )


public_bp.add_url_rule("/", view_func=IndexView.as_view("index"))
