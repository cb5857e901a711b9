from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, replace
from datetime import date
from typing import BinaryIO, Callable, List, Optional

import pandas as pd

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_EMAIL_SEND_DELAY_SECONDS
from ..core.enums import RecipientStatus, Role
from ..core.exceptions import AuthorizationError, ConfirmationRequired, NotFoundError, ValidationError
from ..mail.sender import EmailMessage, EmailSender
from ..reports.service import XLSX_MIMETYPE, ExportFile
from .batch_store import BatchStore
from .history import SentHistoryStore
from .model import Batch, BatchCounts, EmailTemplate, Recipient, count_statuses
from .queue import RateLimitedQueue
from .recipients import parse_recipients, read_workbook, upload_summary
from .template import personalize

logger = logging.getLogger(__name__)

RESULT_STATUS_LABELS = {
    RecipientStatus.SUCCESS: "Gesendet",
    RecipientStatus.ALREADY_SENT: "Bereits gesendet",
    RecipientStatus.FAILED: "Fehlgeschlagen",
    RecipientStatus.PENDING: "Ausstehend",
}

SAMPLE_ROWS = [
    {"Mailadresse": "max@example.com", "Sprache": "DE", "Anrede": "Du", "Name": "Max"},
    {"Mailadresse": "anna@example.com", "Sprache": "EN", "Anrede": "Sie", "Name": "Frau Schmidt"},
    {"Mailadresse": "tom@example.com", "Sprache": "FR", "Anrede": "Du", "Name": "Tom"},
]

NO_RECIPIENTS = "Keine Empfänger zum Senden"
NOTHING_TO_SEND = (
    "Keine neuen E-Mails zum Senden. Alle Empfänger wurden bereits kontaktiert oder sind ungültig."
)
SEND_FAILED = "E-Mail-Versand fehlgeschlagen"


@dataclass(frozen=True)
class UploadOutcome:
    batch: Batch
    message: str


@dataclass(frozen=True)
class SendOutcome:
    batch: Batch
    counts: BatchCounts
    message: str


def _require_hr(current_role: Role) -> None:
    if current_role != Role.HR:
        raise AuthorizationError("Only HR can send rejection emails")


def confirm_prompt(pending: int) -> str:
    return f"Möchten Sie wirklich {pending} E-Mails versenden?"


class RejectionEmailService:
    """Bulk rejection emails: upload, validate, send, export.

    Sending is sequential through a ``RateLimitedQueue``. A failed recipient is
    marked on its own row and never retried; only successful addresses are
    added to the sent history.
    """

    def __init__(
        self,
        history: SentHistoryStore,
        batches: BatchStore,
        mailer: EmailSender,
        *,
        delay_seconds: float = DEFAULT_EMAIL_SEND_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._history = history
        self._batches = batches
        self._mailer = mailer
        self._delay = float(delay_seconds)
        self._sleep = sleep

    def load_upload(self, *, current_role: Role, filename: str, stream: BinaryIO) -> UploadOutcome:
        """Parse an upload into a new stored batch; nothing is stored on error."""
        _require_hr(current_role)
        if not filename:
            raise ValidationError("❌ Fehler: Die Datei konnte nicht gelesen werden.")

        df = read_workbook(filename, stream)
        recipients = parse_recipients(df, set(self._history.load()))

        batch = Batch(
            id=self._batches.new_id(),
            filename=filename,
            recipients=recipients,
            created_at=now_local().isoformat(timespec="seconds"),
        )
        self._batches.save(batch)
        counts = batch.counts()
        logger.info(
            "Loaded batch %s from %s: %d pending, %d already sent, %d invalid",
            batch.id, filename, counts.pending, counts.already_sent, counts.failed,
        )
        return UploadOutcome(batch=batch, message=upload_summary(recipients))

    def get_batch(self, batch_id: Optional[str]) -> Optional[Batch]:
        return self._batches.load(batch_id)

    def discard_batch(self, batch_id: Optional[str]) -> None:
        self._batches.delete(batch_id)

    def _require_batch(self, batch_id: Optional[str]) -> Batch:
        batch = self._batches.load(batch_id)
        if batch is None or not batch.recipients:
            raise NotFoundError(NO_RECIPIENTS)
        return batch

    def preview(self, template: EmailTemplate, recipient: Recipient) -> str:
        return personalize(template.body, recipient)

    def _send_one(self, template: EmailTemplate, recipient: Recipient) -> Recipient:
        if not recipient.email:
            return replace(recipient, status=RecipientStatus.FAILED, error="Keine E-Mail-Adresse")

        message = EmailMessage(
            to=recipient.email,
            subject=personalize(template.subject, recipient),
            body=personalize(template.body, recipient),
            language=recipient.language,
        )
        try:
            result = self._mailer.send(message)
        except Exception as e:
            logger.exception("Sending to %s raised", recipient.email)
            return replace(recipient, status=RecipientStatus.FAILED, error=str(e) or SEND_FAILED)

        if result.ok:
            return replace(recipient, status=RecipientStatus.SUCCESS, error="")
        return replace(recipient, status=RecipientStatus.FAILED, error=result.error or SEND_FAILED)

    def send_batch(
        self,
        *,
        current_role: Role,
        batch_id: Optional[str],
        template: EmailTemplate,
        confirmed_count: Optional[int],
    ) -> SendOutcome:
        """Send every pending row once.

        ``confirmed_count`` must equal the number of pending rows the user was
        asked about; anything else refuses the send.
        """
        _require_hr(current_role)
        batch = self._require_batch(batch_id)

        pending = [r for r in batch.recipients if r.status == RecipientStatus.PENDING]
        if not pending:
            raise ValidationError(NOTHING_TO_SEND)
        if confirmed_count is None or int(confirmed_count) != len(pending):
            raise ConfirmationRequired(confirm_prompt(len(pending)))

        queue: RateLimitedQueue[Recipient, Recipient] = RateLimitedQueue(
            lambda r: self._send_one(template, r),
            delay_seconds=self._delay,
            sleep=self._sleep,
        )
        for r in pending:
            queue.put(r)
        sent = {r.row: r for r in queue.drain()}

        results: List[Recipient] = [sent.get(r.row, r) for r in batch.recipients]
        newly_sent = [r.email.lower() for r in results if r.status == RecipientStatus.SUCCESS and r.row in sent]
        if newly_sent:
            self._history.merge(newly_sent)

        batch.recipients = results
        self._batches.save(batch)

        counts = count_statuses(results)
        message = f"Fertig! {counts.success} von {counts.total} E-Mails gesendet."
        if counts.already_sent:
            message += f" {counts.already_sent} bereits gesendete E-Mails wurden übersprungen."
        logger.info("Batch %s sent: %d ok, %d failed", batch.id, counts.success, counts.failed)
        return SendOutcome(batch=batch, counts=counts, message=message)

    def results_workbook(self, *, current_role: Role, batch_id: Optional[str], today: Optional[date] = None) -> ExportFile:
        _require_hr(current_role)
        batch = self._require_batch(batch_id)
        rows = [
            {
                "Mailadresse": r.email,
                "Name": r.name,
                "Anrede": r.salutation,
                "Sprache": r.language,
                "Status": RESULT_STATUS_LABELS[r.status],
                "Fehler": r.error or "",
            }
            for r in batch.recipients
        ]
        day = (today or now_local().date()).isoformat()
        return ExportFile(
            filename=f"rejection_emails_{day}.xlsx",
            content=_workbook_bytes(
                pd.DataFrame(rows, columns=["Mailadresse", "Name", "Anrede", "Sprache", "Status", "Fehler"]),
                sheet_name="Ergebnisse",
            ),
            mimetype=XLSX_MIMETYPE,
        )

    def template_workbook(self) -> ExportFile:
        df = pd.DataFrame(SAMPLE_ROWS, columns=["Mailadresse", "Sprache", "Anrede", "Name"])
        return ExportFile(
            filename="rejection_email_template.xlsx",
            content=_workbook_bytes(df, sheet_name="Vorlage"),
            mimetype=XLSX_MIMETYPE,
        )

    def history_size(self) -> int:
        return len(self._history.load())

    def clear_history(self, *, current_role: Role) -> None:
        _require_hr(current_role)
        self._history.clear()
        logger.info("Sent email history cleared")


def _workbook_bytes(df: pd.DataFrame, *, sheet_name: str) -> bytes:
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()
