from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, signed_in
from ..container import Container
from ..core.exceptions import DomainError
from .model import DEFAULT_PROJECT_COLOR


def register(app: Flask, container: Container) -> None:
    projects = container.project_service

    @app.route("/admin/projects", methods=["GET"], endpoint="admin_projects")
    @admin_required
    def admin_projects():
        return render_template(
            "admin/projects.html",
            projects=projects.list_projects(),
            default_color=DEFAULT_PROJECT_COLOR,
            active_page="admin_projects",
        )

    @app.route("/admin/projects/add", methods=["POST"], endpoint="add_project")
    @admin_required
    def add_project():
        auth = signed_in()
        try:
            projects.create_project(
                current_role=auth.role,
                created_by=auth.student_id,
                name=request.form.get("name", ""),
                description=request.form.get("description", ""),
                color=request.form.get("color", DEFAULT_PROJECT_COLOR),
            )
            flash("Project created successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Creating project failed")
            flash("Error creating project", "danger")
        return redirect(url_for("admin_projects"))

    @app.route("/admin/projects/<int:project_id>/update", methods=["POST"], endpoint="update_project")
    @admin_required
    def update_project(project_id: int):
        auth = signed_in()
        try:
            projects.update_project(
                current_role=auth.role,
                project_id=project_id,
                name=request.form.get("name", ""),
                description=request.form.get("description", ""),
                color=request.form.get("color", DEFAULT_PROJECT_COLOR),
            )
            flash("Project updated successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Updating project %s failed", project_id)
            flash("Error updating project", "danger")
        return redirect(url_for("admin_projects"))

    @app.route("/admin/projects/<int:project_id>/delete", methods=["POST"], endpoint="delete_project")
    @admin_required
    def delete_project(project_id: int):
        auth = signed_in()
        try:
            projects.delete_project(
                current_role=auth.role,
                project_id=project_id,
                name=request.form.get("name", ""),
            )
            flash("Project deleted successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting project %s failed", project_id)
            flash("Error deleting project", "danger")
        return redirect(url_for("admin_projects"))
