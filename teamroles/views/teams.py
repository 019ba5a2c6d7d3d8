from __future__ import annotations

from flask import Blueprint, flash, jsonify, redirect, request, url_for
from flask.views import MethodView

from ..errors import ConfigurationNotFound, StorageError, ValidationError
from ..session_state import configuration_store, current_workspace, store_workspace


teams_bp = Blueprint("teams", __name__, url_prefix="/teams")


class TeamListView(MethodView):
    def get(self):
        return jsonify([c.to_dict() for c in configuration_store().list()])

    def post(self):
        workspace = current_workspace()
        name = request.form.get("name", "")
        try:
            saved = configuration_store().save(name, workspace.participants.items, workspace.roles.items)
        except ValidationError as e:
            flash(f"{e.title}: {e.message}", "error")
            return redirect(url_for("public.index"))
        except StorageError as e:
            flash(str(e), "error")
            return redirect(url_for("public.index"))

        flash(f'Team saved! "{saved.name}" has been saved successfully.', "success")
        return redirect(url_for("public.index"))


class LoadTeamView(MethodView):
    def post(self, team_id: str):
        store = configuration_store()
        try:
            members, roles = store.load(team_id)
        except ConfigurationNotFound:
            flash("That saved team no longer exists.", "error")
            return redirect(url_for("public.index"))

        workspace = current_workspace()
        workspace.load_team(members, roles)
        store_workspace(workspace)
        flash(f'Team loaded. "{store.get(team_id).name}" has been loaded successfully.', "success")
        return redirect(url_for("public.index"))


class DeleteTeamView(MethodView):
    def post(self, team_id: str):
        try:
            configuration_store().delete(team_id)
        except StorageError as e:
            flash(str(e), "error")
            return redirect(url_for("public.index"))

        flash("Team deleted. The team configuration has been removed.", "success")
        return redirect(url_for("public.index"))


teams_bp.add_url_rule("", view_func=TeamListView.as_view("list"), methods=["GET", "POST"])
teams_bp.add_url_rule("/<team_id>/load", view_func=LoadTeamView.as_view("load"), methods=["POST"])
teams_bp.add_url_rule("/<team_id>/delete", view_func=DeleteTeamView.as_view("delete"), methods=["POST"])
