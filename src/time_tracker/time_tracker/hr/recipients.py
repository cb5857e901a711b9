"""Turning an uploaded applicant spreadsheet into batch rows."""

from __future__ import annotations

import logging
import re
from typing import BinaryIO, Collection, Dict, List, Optional

import pandas as pd

from ..common.validators import is_valid_email
from ..core.constants import DEFAULT_RECIPIENT_LANGUAGE, DEFAULT_RECIPIENT_SALUTATION
from ..core.enums import RecipientStatus
from ..core.exceptions import ValidationError
from .model import Recipient

logger = logging.getLogger(__name__)

EMAIL_HEADERS = ("mailadresse", "e-mail", "email")
NAME_HEADERS = ("name",)
LANGUAGE_HEADERS = ("sprache",)
SALUTATION_HEADERS = ("anrede",)

EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}

ERR_WRONG_TYPE = "❌ Fehler: Bitte laden Sie nur Excel-Dateien hoch (.xlsx oder .xls)"
ERR_EMPTY = "❌ Fehler: Die Excel-Datei ist leer. Bitte fügen Sie Daten hinzu."
ERR_COLUMNS = '❌ Fehler: Die Excel-Datei muss die Spalten "Mailadresse" und "Name" enthalten.'
ERR_UNREADABLE = (
    "❌ Fehler beim Lesen der Datei. Bitte stellen Sie sicher, dass es sich um eine gültige Excel-Datei handelt."
)
ERR_NO_RECIPIENTS = (
    "❌ Fehler: Keine gültigen Empfänger gefunden. Bitte überprüfen Sie die E-Mail-Adressen und Namen."
)

INVALID_EMAIL = "Ungültige E-Mail"
MISSING_NAME = "Name fehlt"
ALREADY_SENT = "⚠️ Bereits gesendet"


def file_extension(filename: str) -> str:
    return (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""


def read_workbook(filename: str, stream: BinaryIO) -> pd.DataFrame:
    """First sheet as strings, blanks as ''."""
    ext = file_extension(filename)
    if ext not in EXCEL_ENGINES:
        raise ValidationError(ERR_WRONG_TYPE)
    try:
        df = pd.read_excel(stream, sheet_name=0, dtype=str, keep_default_na=False, engine=EXCEL_ENGINES[ext])
    except Exception as e:
        logger.warning("Could not read workbook %s: %s", filename, e)
        raise ValidationError(ERR_UNREADABLE)
    return df


def _find_column(columns: Collection[str], candidates) -> Optional[str]:
    by_key: Dict[str, str] = {}
    for col in columns:
        by_key.setdefault(str(col).strip().lower(), col)
    for candidate in candidates:
        if candidate in by_key:
            return by_key[candidate]
    return None


def _cell(row: pd.Series, column: Optional[str]) -> str:
    if column is None:
        return ""
    value = row.get(column, "")
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def classify(email: str, name: str, history: Collection[str]) -> tuple[RecipientStatus, str]:
    if email.lower() in history:
        return RecipientStatus.ALREADY_SENT, ALREADY_SENT
    if not is_valid_email(email):
        return RecipientStatus.FAILED, INVALID_EMAIL
    if not name:
        return RecipientStatus.FAILED, MISSING_NAME
    return RecipientStatus.PENDING, ""


def parse_recipients(df: pd.DataFrame, history: Collection[str]) -> List[Recipient]:
    """Validate rows against the address pattern and the sent history.

    Raises ``ValidationError`` for sheets that cannot be used at all.
    """
    df = df.dropna(how="all")
    if df.empty:
        raise ValidationError(ERR_EMPTY)

    email_col = _find_column(df.columns, EMAIL_HEADERS)
    name_col = _find_column(df.columns, NAME_HEADERS)
    if email_col is None or name_col is None:
        raise ValidationError(ERR_COLUMNS)
    language_col = _find_column(df.columns, LANGUAGE_HEADERS)
    salutation_col = _find_column(df.columns, SALUTATION_HEADERS)

    seen = {h.lower() for h in history}
    recipients: List[Recipient] = []
    for index, (_, row) in enumerate(df.iterrows(), start=1):
        email = _cell(row, email_col)
        name = _cell(row, name_col)
        if not email and not name and not _cell(row, language_col) and not _cell(row, salutation_col):
            continue
        status, error = classify(email, name, seen)
        if status == RecipientStatus.PENDING:
            # a repeated address in the same sheet is only mailed once
            seen.add(email.lower())
        recipients.append(
            Recipient(
                row=index,
                email=email,
                name=name,
                language=_cell(row, language_col) or DEFAULT_RECIPIENT_LANGUAGE,
                salutation=_cell(row, salutation_col) or DEFAULT_RECIPIENT_SALUTATION,
                status=status,
                error=error,
            )
        )

    if not recipients:
        raise ValidationError(ERR_EMPTY)
    if not any(r.status in (RecipientStatus.PENDING, RecipientStatus.ALREADY_SENT) for r in recipients):
        raise ValidationError(ERR_NO_RECIPIENTS)
    return recipients


def upload_summary(recipients: List[Recipient]) -> str:
    pending = sum(1 for r in recipients if r.status == RecipientStatus.PENDING)
    already = sum(1 for r in recipients if r.status == RecipientStatus.ALREADY_SENT)
    invalid = len(recipients) - pending - already

    parts = []
    if already:
        parts.append(f"⚠️ {already} E-Mail(s) bereits gesendet (wird übersprungen).")
    if pending:
        parts.append(f"{pending} neue Empfänger gefunden.")
    if invalid:
        parts.append(f"{invalid} ungültige Zeile(n) übersprungen.")
    return " ".join(parts) or f"✅ Erfolg: {pending} Empfänger erfolgreich geladen."
