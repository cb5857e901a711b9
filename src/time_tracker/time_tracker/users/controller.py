from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, roles_required, signed_in
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from .service import CREATABLE_ROLES, generate_password


def _users_endpoint(role: Role) -> str:
    return "hr_users" if role == Role.HR else "admin_users"


def register(app: Flask, container: Container) -> None:
    users = container.user_service

    def _render_users(auth):
        listing = users.list_users() if auth.role == Role.ADMIN else users.list_students()
        return render_template(
            "admin/users.html",
            users=listing,
            creatable_roles=sorted(r.value for r in CREATABLE_ROLES.get(auth.role, ())),
            can_manage=auth.role == Role.ADMIN,
            current_student_id=auth.student_id,
            active_page=_users_endpoint(auth.role),
        )

    @app.route("/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    def admin_users():
        return _render_users(signed_in())

    @app.route("/hr/users", methods=["GET"], endpoint="hr_users")
    @roles_required(Role.HR)
    def hr_users():
        return _render_users(signed_in())

    @app.route("/users/add", methods=["POST"], endpoint="add_user")
    @roles_required(Role.ADMIN, Role.HR)
    def add_user():
        auth = signed_in()
        password = request.form.get("password", "")
        generated = request.form.get("generate_password") == "1" or not password
        if generated:
            password = generate_password()
        try:
            try:
                role = Role(request.form.get("role", Role.STUDENT.value))
            except ValueError:
                raise ValidationError("Invalid role")

            student = users.create_user(
                current_role=auth.role,
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                password=password,
                role=role,
            )
            if generated:
                flash(f"User {student.email} created. Initial password: {password}", "success")
            else:
                flash(f"User {student.email} created successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Creating user failed")
            flash("Error creating user", "danger")
        return redirect(url_for(_users_endpoint(auth.role)))

    @app.route("/admin/users/<int:student_id>/delete", methods=["POST"], endpoint="delete_user")
    @admin_required
    def delete_user(student_id: int):
        auth = signed_in()
        try:
            users.delete_user(current_role=auth.role, current_student_id=auth.student_id, student_id=student_id)
            flash("User deleted successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Deleting user %s failed", student_id)
            flash("Error deleting user", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:student_id>/role", methods=["POST"], endpoint="set_user_role")
    @admin_required
    def set_user_role(student_id: int):
        auth = signed_in()
        try:
            users.set_role(current_role=auth.role, student_id=student_id, role=request.form.get("role", ""))
            flash("Role updated successfully!", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Changing role of user %s failed", student_id)
            flash("Error updating role", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<int:student_id>/status", methods=["POST"], endpoint="toggle_user_status")
    @admin_required
    def toggle_user_status(student_id: int):
        auth = signed_in()
        try:
            status = users.toggle_status(current_role=auth.role, student_id=student_id)
            flash(f"User is now {status.value}", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Changing status of user %s failed", student_id)
            flash("Error updating status", "danger")
        return redirect(url_for("admin_users"))
