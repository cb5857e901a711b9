from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, roles_required, signed_in
from ..common.datetime_utils import today_local
from ..container import Container
from ..core.enums import EntryStatus, Role
from ..core.exceptions import ConfirmationRequired, DomainError
from ..routing.controller import session_router
from ..routing.view_router import View, ViewState


def _int_or_none(value):
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def register(app: Flask, container: Container) -> None:
    entries = container.time_entry_service

    def _student_page(*, form=None, confirm_message=None, editing_id=None):
        auth = signed_in()
        today_only = request.args.get("today") == "1"
        data = entries.list_for_student(student_id=auth.student_id, today_only=today_only)

        if editing_id is None and form is None:
            editing = next((e for e in data.entries if e.id == request.args.get("edit", type=int) and e.is_pending), None)
            if editing is not None:
                editing_id = editing.id
                form = {
                    "date": editing.date.isoformat(),
                    "start_time": editing.start_time.strftime("%H:%M"),
                    "end_time": editing.end_time.strftime("%H:%M"),
                    "description": editing.description or "",
                }

        tasks = container.task_service.list_for_student(auth.student_id)
        project_ids = {t.project_id for t in tasks}
        projects = [p for p in container.project_service.list_projects() if p.id in project_ids]
        return render_template(
            "student/home.html",
            entries=data.entries,
            total_hours=data.total_hours,
            tasks=tasks,
            projects=projects,
            today=today_local().isoformat(),
            date_locked=container.settings_service.is_date_locked(),
            today_only=today_only,
            form=form or {},
            confirm_message=confirm_message,
            editing_id=editing_id,
        )

    @app.route("/student", methods=["GET"], endpoint="student_home")
    @roles_required(Role.STUDENT)
    def student_home():
        session_router().persist(ViewState(View.STUDENT))
        return _student_page()

    @app.route("/student/entries", methods=["POST"], endpoint="create_entry")
    @roles_required(Role.STUDENT)
    def create_entry():
        auth = signed_in()
        form = request.form.to_dict()
        try:
            entries.create_entry(
                student_id=auth.student_id,
                entry_date=form.get("date", ""),
                start_time=form.get("start_time", ""),
                end_time=form.get("end_time", ""),
                project_id=_int_or_none(form.get("project_id")),
                task_id=_int_or_none(form.get("task_id")),
                description=form.get("description", ""),
                confirm_long=form.get("confirm_long") == "1",
            )
            flash("Time entry added successfully!", "success")
            return redirect(url_for("student_home"))
        except ConfirmationRequired as e:
            return _student_page(form=form, confirm_message=str(e))
        except DomainError as e:
            flash(str(e), "danger")
        except Exception as e:
            app.logger.exception("Adding time entry failed")
            flash(f"Error adding time entry: {e}", "danger")
        return _student_page(form=form)

    @app.route("/student/entries/<int:entry_id>/update", methods=["POST"], endpoint="update_entry")
    @roles_required(Role.STUDENT)
    def update_entry(entry_id: int):
        auth = signed_in()
        form = request.form.to_dict()
        try:
            entries.update_entry(
                student_id=auth.student_id,
                entry_id=entry_id,
                entry_date=form.get("date", ""),
                start_time=form.get("start_time", ""),
                end_time=form.get("end_time", ""),
                description=form.get("description", ""),
                confirm_long=form.get("confirm_long") == "1",
            )
            flash("Time entry updated successfully!", "success")
            return redirect(url_for("student_home"))
        except ConfirmationRequired as e:
            return _student_page(form=form, confirm_message=str(e), editing_id=entry_id)
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Updating time entry %s failed", entry_id)
            flash("Error updating time entry", "danger")
        return redirect(url_for("student_home"))

    @app.route("/student/entries/<int:entry_id>/delete", methods=["POST"], endpoint="delete_entry")
    @roles_required(Role.STUDENT)
    def delete_entry(entry_id: int):
        auth = signed_in()
        try:
            entries.delete_entry(student_id=auth.student_id, entry_id=entry_id)
            flash("Time entry deleted successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting time entry %s failed", entry_id)
            flash("Error deleting time entry", "danger")
        return redirect(url_for("student_home"))

    @app.route("/admin/entries/<int:entry_id>/status", methods=["POST"], endpoint="set_entry_status")
    @admin_required
    def set_entry_status(entry_id: int):
        auth = signed_in()
        status = request.form.get("status", "")
        try:
            entries.set_status(
                current_role=auth.role,
                entry_id=entry_id,
                status=status,
                override=request.form.get("override") == "1",
            )
            flash(f"Time entry {status} successfully!", "success")
        except ConfirmationRequired as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_home", confirm_entry=entry_id, confirm_status=status))
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Updating status of entry %s failed", entry_id)
            flash("Error updating status", "danger")
        return redirect(url_for("admin_home"))

    @app.route("/admin/entries", methods=["GET"], endpoint="admin_entries")
    @admin_required
    def admin_entries():
        status = request.args.get("status") or None
        try:
            status_filter = EntryStatus(status) if status else None
        except ValueError:
            status_filter = None
        return render_template(
            "admin/entries.html",
            rows=entries.list_rows(status=status_filter),
            status=status_filter.value if status_filter else "",
            active_page="admin_entries",
        )
