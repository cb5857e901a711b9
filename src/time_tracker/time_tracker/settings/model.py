from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AppSetting:
    key: str
    value: str
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    @property
    def enabled(self) -> bool:
        return self.value.strip().lower() == "true"
