from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, signed_in
from ..common.datetime_utils import parse_optional_date, today_local
from ..container import Container
from ..core.exceptions import DomainError
from .service import ExportFile


def export_response(app: Flask, export: ExportFile):
    response = app.response_class(export.content, mimetype=export.mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    return response


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/admin/reports", methods=["GET"], endpoint="admin_reports")
    @admin_required
    def admin_reports():
        return render_template(
            "admin/reports.html",
            students=container.user_service.list_students(),
            active_page="admin_reports",
        )

    @app.route("/admin/reports/timesheet.xlsx", methods=["GET"], endpoint="export_timesheet")
    @admin_required
    def export_timesheet():
        auth = signed_in()
        try:
            export = reports.student_timesheet(
                current_role=auth.role,
                student_id=request.args.get("student_id", type=int),
                date_from=parse_optional_date(request.args.get("date_from", ""), "Start date"),
                date_to=parse_optional_date(request.args.get("date_to", ""), "End date"),
            )
            return export_response(app, export)
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Timesheet export failed")
            flash("Error generating timesheet", "danger")
        return redirect(url_for("admin_reports"))

    @app.route("/admin/reports/entries.csv", methods=["GET"], endpoint="export_entries_csv")
    @admin_required
    def export_entries_csv():
        auth = signed_in()
        try:
            return export_response(app, reports.entries_csv(current_role=auth.role, today=today_local()))
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("CSV export failed")
            flash("Error exporting time entries", "danger")
        return redirect(url_for("admin_reports"))
