from __future__ import annotations

from dataclasses import replace

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..routing.controller import redirect_to, session_router, snapshot
from ..routing.view_router import RouteEvent, UrlSignals, View, ViewState
from .guards import login_required, signed_in
from .messages import describe_auth_error
from .session_store import clear_session, load_session, save_session

RESET_LINK_SENT = "If an account exists for this address, a password reset link has been sent."
ACCOUNT_UNAVAILABLE = "Your account is no longer available. Please sign in again."


def register(app: Flask, container: Container) -> None:
    auth_service = container.auth_service

    def _current_state(default: View) -> ViewState:
        return ViewState(session_router().persisted() or default)

    @app.before_request
    def refresh_signed_in_user():
        """Re-read role and status on every request; drop sessions that went stale."""
        if request.endpoint == "static":
            return None
        stored = load_session(session)
        if stored is None:
            return None

        auth = auth_service.get_session(stored)
        if auth is None or not (auth.recovery or auth.has_profile):
            app.logger.info("Dropping stale session for %s", stored.auth_user_id)
            clear_session(session)
            session_router().clear()
            flash(ACCOUNT_UNAVAILABLE, "warning")
            return None
        if auth != stored:
            save_session(session, auth)
        return None

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        if signed_in() is not None:
            return redirect(url_for("index"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            try:
                auth = auth_service.sign_in_with_password(email, password)
                language = session.get("language")
                session.clear()
                if language:
                    session["language"] = language
                save_session(session, auth)
                state = session_router().dispatch(ViewState(View.LOGIN), RouteEvent.LOGIN_SUCCEEDED, snapshot(auth))
                return redirect_to(state)
            except AuthenticationError as e:
                flash(describe_auth_error(e), "danger")
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                app.logger.exception("Sign-in failed")
                flash("System error while signing in", "danger")

        session_router().persist(ViewState(View.LOGIN))
        return render_template("auth/login.html", email=request.form.get("email", ""))

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    def logout():
        auth = load_session(session)
        auth_service.sign_out(auth)
        clear_session(session)
        state = session_router().dispatch(_current_state(View.LOGIN), RouteEvent.LOGOUT)
        flash("You have been signed out.", "info")
        return redirect_to(state)

    @app.route("/forgot-password", methods=["GET", "POST"], endpoint="forgot_password")
    def forgot_password():
        router = session_router()
        if request.method == "GET":
            state = router.dispatch(_current_state(View.LOGIN), RouteEvent.FORGOT_PASSWORD_REQUESTED)
            if state.view != View.FORGOT_PASSWORD:
                router.persist(ViewState(View.FORGOT_PASSWORD))
            return render_template("auth/forgot_password.html")

        email = request.form.get("email", "")
        try:
            auth_service.reset_password_for_email(email)
            flash(RESET_LINK_SENT, "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Password reset request failed")
            flash("Failed to send reset email. Please try again later.", "danger")
        return render_template("auth/forgot_password.html", email=email)

    @app.route("/back-to-login", methods=["GET"], endpoint="back_to_login")
    def back_to_login():
        state = session_router().dispatch(_current_state(View.LOGIN), RouteEvent.BACK_TO_LOGIN)
        return redirect_to(state)

    @app.route("/reset-password", methods=["GET", "POST"], endpoint="reset_password")
    def reset_password():
        router = session_router()

        if request.method == "GET":
            signals = UrlSignals.from_params(request.args.to_dict(), path=request.path)
            state = router.initial_view(signals)
            error = state.reset_error

            token = signals.recovery_token
            if not error and token:
                try:
                    auth = auth_service.exchange_recovery_token(token)
                    save_session(session, auth)
                    # Drop the token from the address bar.
                    return redirect(url_for("reset_password"))
                except AuthenticationError as e:
                    error = describe_auth_error(e)

            if not error and load_session(session) is None:
                error = "Your reset session has expired. Please request a new link."
            return render_template("auth/reset_password.html", error=error)

        auth = load_session(session)
        try:
            auth_service.update_user_password(
                auth,
                request.form.get("password", ""),
                request.form.get("confirm_password", ""),
            )
        except AuthenticationError as e:
            return render_template("auth/reset_password.html", error=describe_auth_error(e))
        except ValidationError as e:
            flash(str(e), "danger")
            return render_template("auth/reset_password.html", error=None)
        except Exception:
            app.logger.exception("Password reset failed")
            flash("System error while updating the password", "danger")
            return render_template("auth/reset_password.html", error=None)

        auth_service.sign_out(auth)
        clear_session(session)
        state = router.dispatch(ViewState(View.RESET_PASSWORD), RouteEvent.RESET_SUCCEEDED)
        flash("Your password has been updated. Please sign in with your new password.", "success")
        return redirect_to(state)

    @app.route("/change-password", methods=["GET", "POST"], endpoint="change_password")
    @login_required
    def change_password():
        router = session_router()
        auth = signed_in()

        if request.method == "GET":
            current = _current_state(View.LOGIN)
            state = router.dispatch(current, RouteEvent.CHANGE_PASSWORD_REQUESTED)
            if state.view != View.CHANGE_PASSWORD:
                router.persist(ViewState(View.CHANGE_PASSWORD))
            return render_template("auth/change_password.html", first_login=auth.first_login)

        try:
            auth_service.change_password(
                auth,
                current_password=request.form.get("current_password", ""),
                new_password=request.form.get("new_password", ""),
                confirm_password=request.form.get("confirm_password", ""),
            )
        except DomainError as e:
            flash(str(e), "danger")
            return render_template("auth/change_password.html", first_login=auth.first_login)
        except Exception:
            app.logger.exception("Password change failed")
            flash("System error while changing the password", "danger")
            return render_template("auth/change_password.html", first_login=auth.first_login)

        save_session(session, replace(auth, first_login=False))
        state = router.dispatch(ViewState(View.CHANGE_PASSWORD), RouteEvent.PASSWORD_CHANGED, snapshot(auth))
        flash("Password changed successfully!", "success")
        return redirect_to(state)
