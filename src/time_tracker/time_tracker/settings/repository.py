from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AppSetting


class SettingsRepository(Protocol):
    def list_all(self) -> Sequence[AppSetting]:
        raise NotImplementedError

    def get(self, key: str) -> Optional[AppSetting]:
        raise NotImplementedError

    def save(self, key: str, value: str, *, updated_by: Optional[int], updated_at: datetime) -> None:
        raise NotImplementedError
