from __future__ import annotations

from flask import Flask, render_template, request

from ..auth.guards import admin_required
from ..container import Container
from ..core.enums import EntryStatus
from ..routing.controller import session_router
from ..routing.view_router import View, ViewState


def register(app: Flask, container: Container) -> None:
    @app.route("/admin", methods=["GET"], endpoint="admin_home")
    @admin_required
    def admin_home():
        session_router().persist(ViewState(View.ADMIN))
        stats = container.dashboard_service.stats()
        pending = container.time_entry_service.list_rows(status=EntryStatus.PENDING)
        return render_template(
            "admin/dashboard.html",
            stats=stats,
            pending_rows=pending,
            confirm_entry=request.args.get("confirm_entry", type=int),
            confirm_status=request.args.get("confirm_status", ""),
            active_page="admin_home",
        )
