from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..auth.guards import roles_required, signed_in
from ..common.datetime_utils import today_local
from ..container import Container
from ..core.enums import RecipientStatus, Role
from ..core.exceptions import ConfirmationRequired, DomainError
from ..reports.controller import export_response
from ..routing.controller import session_router
from ..routing.view_router import View, ViewState
from .template import DEFAULT_TEMPLATE, template_from_mapping, template_to_mapping

BATCH_KEY = "hr_batch_id"
TEMPLATE_KEY = "hr_template"


def register(app: Flask, container: Container) -> None:
    emails = container.rejection_email_service

    def _template():
        return template_from_mapping(session.get(TEMPLATE_KEY))

    def _render_home(*, confirm_message=None):
        batch = emails.get_batch(session.get(BATCH_KEY))
        if batch is None:
            session.pop(BATCH_KEY, None)
        template = _template()
        pending = [r for r in batch.recipients if r.status == RecipientStatus.PENDING] if batch else []
        preview = emails.preview(template, pending[0]) if pending else None
        return render_template(
            "hr/home.html",
            batch=batch,
            counts=batch.counts() if batch else None,
            pending_count=len(pending),
            template=template,
            preview=preview,
            preview_recipient=pending[0] if pending else None,
            history_size=emails.history_size(),
            confirm_message=confirm_message,
            active_page="hr_home",
        )

    @app.route("/hr", methods=["GET"], endpoint="hr_home")
    @roles_required(Role.HR)
    def hr_home():
        session_router().persist(ViewState(View.HR))
        return _render_home()

    @app.route("/hr/upload", methods=["POST"], endpoint="hr_upload")
    @roles_required(Role.HR)
    def hr_upload():
        auth = signed_in()
        upload = request.files.get("file")
        try:
            outcome = emails.load_upload(
                current_role=auth.role,
                filename=upload.filename if upload else "",
                stream=upload.stream if upload else None,
            )
            session[BATCH_KEY] = outcome.batch.id
            flash(outcome.message, "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Reading recipient upload failed")
            flash("❌ Fehler: Die Datei konnte nicht gelesen werden.", "danger")
        return redirect(url_for("hr_home"))

    @app.route("/hr/template", methods=["POST"], endpoint="hr_save_template")
    @roles_required(Role.HR)
    def hr_save_template():
        if request.form.get("reset") == "1":
            session[TEMPLATE_KEY] = template_to_mapping(DEFAULT_TEMPLATE)
            flash("Vorlage zurückgesetzt", "info")
        else:
            template = template_from_mapping(
                {"subject": request.form.get("subject", ""), "body": request.form.get("body", "")}
            )
            session[TEMPLATE_KEY] = template_to_mapping(template)
            flash("Vorlage gespeichert", "success")
        return redirect(url_for("hr_home"))

    @app.route("/hr/send", methods=["POST"], endpoint="hr_send")
    @roles_required(Role.HR)
    def hr_send():
        auth = signed_in()
        confirmed = request.form.get("confirmed_count", type=int)
        try:
            outcome = emails.send_batch(
                current_role=auth.role,
                batch_id=session.get(BATCH_KEY),
                template=_template(),
                confirmed_count=confirmed,
            )
            flash(outcome.message, "success" if not outcome.counts.failed else "warning")
        except ConfirmationRequired as e:
            return _render_home(confirm_message=str(e))
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Sending rejection emails failed")
            flash("E-Mail-Versand fehlgeschlagen", "danger")
        return redirect(url_for("hr_home"))

    @app.route("/hr/reset", methods=["POST"], endpoint="hr_reset")
    @roles_required(Role.HR)
    def hr_reset():
        emails.discard_batch(session.pop(BATCH_KEY, None))
        return redirect(url_for("hr_home"))

    @app.route("/hr/results.xlsx", methods=["GET"], endpoint="hr_results")
    @roles_required(Role.HR)
    def hr_results():
        auth = signed_in()
        try:
            export = emails.results_workbook(
                current_role=auth.role,
                batch_id=session.get(BATCH_KEY),
                today=today_local(),
            )
            return export_response(app, export)
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Results export failed")
            flash("Fehler beim Export der Ergebnisse", "danger")
        return redirect(url_for("hr_home"))

    @app.route("/hr/template.xlsx", methods=["GET"], endpoint="hr_template_download")
    @roles_required(Role.HR)
    def hr_template_download():
        return export_response(app, emails.template_workbook())

    @app.route("/hr/history/clear", methods=["POST"], endpoint="hr_clear_history")
    @roles_required(Role.HR)
    def hr_clear_history():
        auth = signed_in()
        try:
            emails.clear_history(current_role=auth.role)
            flash("Versandhistorie gelöscht", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            app.logger.exception("Clearing sent history failed")
            flash("Fehler beim Löschen der Versandhistorie", "danger")
        return redirect(url_for("hr_home"))
