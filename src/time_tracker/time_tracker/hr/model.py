from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Optional

from ..core.enums import RecipientStatus


@dataclass(frozen=True)
class Recipient:
    """One spreadsheet row of a rejection email batch."""

    row: int
    email: str
    name: str
    language: str
    salutation: str
    status: RecipientStatus
    error: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Recipient":
        return cls(
            row=int(data["row"]),
            email=data.get("email") or "",
            name=data.get("name") or "",
            language=data.get("language") or "",
            salutation=data.get("salutation") or "",
            status=RecipientStatus(data["status"]),
            error=data.get("error") or "",
        )


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    body: str


@dataclass(frozen=True)
class BatchCounts:
    total: int
    pending: int
    success: int
    already_sent: int
    failed: int


@dataclass
class Batch:
    id: str
    filename: str
    recipients: List[Recipient] = field(default_factory=list)
    created_at: Optional[str] = None

    def counts(self) -> BatchCounts:
        return count_statuses(self.recipients)


def count_statuses(recipients: List[Recipient]) -> BatchCounts:
    def _n(status: RecipientStatus) -> int:
        return sum(1 for r in recipients if r.status == status)

    return BatchCounts(
        total=len(recipients),
        pending=_n(RecipientStatus.PENDING),
        success=_n(RecipientStatus.SUCCESS),
        already_sent=_n(RecipientStatus.ALREADY_SENT),
        failed=_n(RecipientStatus.FAILED),
    )
