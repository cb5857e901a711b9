from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from .layout import render_branded_html

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str
    language: Optional[str] = None


@dataclass(frozen=True)
class SendResult:
    ok: bool
    error: Optional[str] = None


class EmailSender(Protocol):
    def send(self, message: EmailMessage) -> SendResult:
        raise NotImplementedError


class ResendEmailSender(EmailSender):
    """Transactional email through the Resend HTTP API.

    Any transport or API failure is turned into a failed ``SendResult``; the
    caller decides what a failure means for its workflow.
    """

    def __init__(
        self,
        *,
        api_key: str,
        sender: str,
        timeout: float = 10.0,
        api_url: str = RESEND_API_URL,
        http: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._sender = sender
        self._timeout = float(timeout)
        self._api_url = api_url
        self._http = http or requests.Session()

    def send(self, message: EmailMessage) -> SendResult:
        if not message.to or not message.subject or not message.body:
            return SendResult(ok=False, error="Missing required fields")

        payload = {
            "from": self._sender,
            "to": message.to,
            "subject": message.subject,
            "html": render_branded_html(message.body),
        }
        try:
            response = self._http.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("Email to %s failed: %s", message.to, e)
            return SendResult(ok=False, error=str(e))

        if not response.ok:
            logger.warning("Email API rejected message to %s (HTTP %s)", message.to, response.status_code)
            return SendResult(ok=False, error="E-Mail-Versand fehlgeschlagen")
        return SendResult(ok=True)


class LoggingEmailSender(EmailSender):
    """Local/dev sender: logs the message and reports success."""

    def __init__(self, *, keep_last: int = 50):
        self.sent: deque = deque(maxlen=keep_last)

    def send(self, message: EmailMessage) -> SendResult:
        logger.info("[LOCAL TEST] Would send email to: %s", message.to)
        logger.info("Subject: %s", message.subject)
        logger.debug("Body: %s", message.body)
        self.sent.append(message)
        return SendResult(ok=True)
