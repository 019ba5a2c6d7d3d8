from __future__ import annotations

import logging

from flask import Blueprint, flash, jsonify, redirect, request, url_for
from flask.views import MethodView

from ..errors import ValidationError
from ..services.reveal import plan_reveal
from ..session_state import current_workspace, reveal_settings, store_workspace

logger = logging.getLogger(__name__)

team_bp = Blueprint("team", __name__)


class _CollectionAddView(MethodView):
    attribute = ""
    label = ""

    def post(self):
        workspace = current_workspace()
        collection = getattr(workspace, self.attribute)
        try:
            item = collection.add(request.form.get("name", ""))
        except ValidationError as e:
            flash(f"{e.title}: {e.message}", "error")
            return redirect(url_for("public.index"))

        store_workspace(workspace)
        flash(f"Added {self.label} {item.name}.", "success")
        return redirect(url_for("public.index"))


class _CollectionRemoveView(MethodView):
    attribute = ""

    def post(self, item_id: str):
        workspace = current_workspace()
        getattr(workspace, self.attribute).remove(item_id)
        store_workspace(workspace)
        return redirect(url_for("public.index"))


class AddParticipantView(_CollectionAddView):
    attribute = "participants"
    label = "team member"


class RemoveParticipantView(_CollectionRemoveView):
    attribute = "participants"


class AddRoleView(_CollectionAddView):
    attribute = "roles"
    label = "role"


class RemoveRoleView(_CollectionRemoveView):
    attribute = "roles"


class ShuffleView(MethodView):
    """
    Draws the assignment, commits it to the session and returns every reveal
    frame for the page to play back at ``interval_ms``.
    """

    def post(self):
        workspace = current_workspace()
        ticks, interval_ms = reveal_settings()
        try:
            frames = plan_reveal(workspace.participants.items, workspace.roles.items, ticks)
        except ValidationError as e:
            return jsonify(e.to_dict()), 400

        workspace.apply_assignment(frames[-1].participants)
        store_workspace(workspace)
        logger.info("Assigned %d roles across %d participants", len(workspace.roles), len(workspace.participants))

        flash("Roles assigned! Team roles have been randomly allocated.", "success")
        return jsonify(
            {
                "interval_ms": interval_ms,
                "frames": [frame.to_dict() for frame in frames],
            }
        )


team_bp.add_url_rule("/participants", view_func=AddParticipantView.as_view("add_participant"), methods=["POST"])
team_bp.add_url_rule(
    "/participants/<item_id>/delete",
    view_func=RemoveParticipantView.as_view("remove_participant"),
    methods=["POST"],
)
team_bp.add_url_rule("/roles", view_func=AddRoleView.as_view("add_role"), methods=["POST"])
team_bp.add_url_rule("/roles/<item_id>/delete", view_func=RemoveRoleView.as_view("remove_role"), methods=["POST"])
team_bp.add_url_rule("/shuffle", view_func=ShuffleView.as_view("shuffle"), methods=["POST"])
