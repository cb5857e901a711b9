from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


class SentHistoryStore:
    """Lower-cased addresses that already received a rejection email.

    Stored as a JSON array and rewritten as a whole on every change; with
    concurrent writers the last one wins.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[str]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError) as e:
            logger.error("Error parsing saved history %s: %s", self._path, e)
            return []
        if not isinstance(data, list):
            return []
        return [str(x).lower() for x in data if x]

    def _write(self, emails: List[str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(emails, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self._path)

    def merge(self, emails: Iterable[str]) -> List[str]:
        """Union with the stored history; order of first appearance is kept."""
        current = self.load()
        known = set(current)
        for email in emails:
            key = (email or "").strip().lower()
            if key and key not in known:
                known.add(key)
                current.append(key)
        self._write(current)
        return current

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()
