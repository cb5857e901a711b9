from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import PROTECTED_PROJECT_NAMES

DEFAULT_PROJECT_COLOR = "#667eea"


@dataclass(frozen=True)
class Project:
    id: int
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_PROJECT_COLOR
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_protected(self) -> bool:
        return is_protected_project_name(self.name)


def is_protected_project_name(name: Optional[str]) -> bool:
    return (name or "").strip().casefold() in PROTECTED_PROJECT_NAMES
