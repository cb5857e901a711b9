from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, signed_in
from ..common.datetime_utils import today_local
from ..container import Container
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import DomainError
from .service import group_by_project


def register(app: Flask, container: Container) -> None:
    tasks = container.task_service

    @app.route("/admin/tasks", methods=["GET"], endpoint="admin_tasks")
    @admin_required
    def admin_tasks():
        all_tasks = tasks.list_tasks()
        projects = container.project_service.list_projects()
        students = {s.id: s for s in container.user_service.list_students()}
        return render_template(
            "admin/tasks.html",
            groups=group_by_project(all_tasks, projects),
            projects=projects,
            students=students,
            overdue=tasks.overdue_ids(all_tasks, today_local()),
            priorities=[p.value for p in TaskPriority],
            statuses=[s.value for s in TaskStatus],
            active_page="admin_tasks",
        )

    @app.route("/admin/tasks/add", methods=["POST"], endpoint="add_task")
    @admin_required
    def add_task():
        auth = signed_in()
        try:
            project_id = request.form.get("project_id") or None
            tasks.create_task(
                current_role=auth.role,
                assigned_by=auth.student_id,
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                project_id=int(project_id) if project_id else None,
                student_ids=request.form.getlist("student_ids"),
                priority=request.form.get("priority", TaskPriority.MEDIUM.value),
                due_date=request.form.get("due_date", ""),
            )
            flash("Task created successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Creating task failed")
            flash("Error creating task", "danger")
        return redirect(url_for("admin_tasks"))

    @app.route("/admin/tasks/<int:task_id>/status", methods=["POST"], endpoint="update_task_status")
    @admin_required
    def update_task_status(task_id: int):
        auth = signed_in()
        try:
            tasks.update_status(current_role=auth.role, task_id=task_id, status=request.form.get("status", ""))
            flash("Task status updated!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Updating task %s failed", task_id)
            flash("Error updating task", "danger")
        return redirect(url_for("admin_tasks"))

    @app.route("/admin/tasks/<int:task_id>/delete", methods=["POST"], endpoint="delete_task")
    @admin_required
    def delete_task(task_id: int):
        auth = signed_in()
        try:
            tasks.delete_task(current_role=auth.role, task_id=task_id)
            flash("Task deleted successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting task %s failed", task_id)
            flash("Error deleting task", "danger")
        return redirect(url_for("admin_tasks"))
