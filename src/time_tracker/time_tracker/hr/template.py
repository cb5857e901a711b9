from __future__ import annotations

import re
from typing import Mapping, Optional

from .model import EmailTemplate, Recipient

DEFAULT_SUBJECT = "Ihre Bewerbung bei OSO"
DEFAULT_BODY = """{anrede} {name},

vielen Dank für Ihr Interesse an einer Position bei OSO und die Zeit, die Sie in Ihre Bewerbung investiert haben.

Nach sorgfältiger Prüfung aller Bewerbungen müssen wir Ihnen leider mitteilen, dass wir uns für andere Kandidaten entschieden haben, deren Profile besser zu den aktuellen Anforderungen passen.

Wir wünschen Ihnen für Ihren weiteren beruflichen Weg alles Gute und viel Erfolg.

Mit freundlichen Grüßen,
OSO HR Team"""

DEFAULT_TEMPLATE = EmailTemplate(subject=DEFAULT_SUBJECT, body=DEFAULT_BODY)

_PLACEHOLDERS = {
    "anrede": re.compile(r"\{anrede\}", re.IGNORECASE),
    "name": re.compile(r"\{name\}", re.IGNORECASE),
    "sprache": re.compile(r"\{sprache\}", re.IGNORECASE),
}


def personalize(text: str, recipient: Recipient) -> str:
    values = {"anrede": recipient.salutation, "name": recipient.name, "sprache": recipient.language}
    for key, pattern in _PLACEHOLDERS.items():
        # callable replacement so backslashes in names are taken literally
        text = pattern.sub(lambda _m, v=values[key]: v, text)
    return text


def template_from_mapping(data: Optional[Mapping]) -> EmailTemplate:
    if not data:
        return DEFAULT_TEMPLATE
    return EmailTemplate(
        subject=data.get("subject") or DEFAULT_SUBJECT,
        body=data.get("body") or DEFAULT_BODY,
    )


def template_to_mapping(template: EmailTemplate) -> dict:
    return {"subject": template.subject, "body": template.body}
