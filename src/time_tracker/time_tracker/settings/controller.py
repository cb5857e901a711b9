from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, signed_in
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/admin/settings", methods=["GET", "POST"], endpoint="admin_settings")
    @admin_required
    def admin_settings():
        if request.method == "POST":
            auth = signed_in()
            try:
                settings.set_date_lock(
                    current_role=auth.role,
                    enabled=request.form.get("lock_date_to_today") == "1",
                    updated_by=auth.student_id,
                )
                flash("Settings saved successfully!", "success")
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Saving settings failed")
                flash("Error saving settings", "danger")
            return redirect(url_for("admin_settings"))

        return render_template(
            "admin/settings.html",
            date_locked=settings.is_date_locked(),
            settings=settings.list_settings(),
            active_page="admin_settings",
        )
