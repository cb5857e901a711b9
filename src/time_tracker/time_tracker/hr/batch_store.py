from __future__ import annotations

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Optional

from .model import Batch, Recipient

logger = logging.getLogger(__name__)

_BATCH_ID = re.compile(r"^[0-9a-f]{32}$")


class BatchStore:
    """Uploaded recipient batches, one JSON file per batch."""

    def __init__(self, directory: Path):
        self._dir = Path(directory)

    def _path(self, batch_id: str) -> Optional[Path]:
        if not batch_id or not _BATCH_ID.match(batch_id):
            return None
        return self._dir / f"{batch_id}.json"

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def save(self, batch: Batch) -> None:
        path = self._path(batch.id)
        if path is None:
            raise ValueError(f"Invalid batch id: {batch.id!r}")
        self._dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "id": batch.id,
            "filename": batch.filename,
            "created_at": batch.created_at,
            "recipients": [r.to_dict() for r in batch.recipients],
        }
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    def load(self, batch_id: Optional[str]) -> Optional[Batch]:
        path = self._path(batch_id or "")
        if path is None or not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Unreadable batch file %s: %s", path, e)
            return None
        return Batch(
            id=data["id"],
            filename=data.get("filename") or "",
            created_at=data.get("created_at"),
            recipients=[Recipient.from_dict(r) for r in data.get("recipients", [])],
        )

    def delete(self, batch_id: Optional[str]) -> None:
        path = self._path(batch_id or "")
        if path is not None and path.exists():
            path.unlink()
