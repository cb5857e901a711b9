from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import LOCK_DATE_SETTING_KEY
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import AppSetting
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def list_settings(self) -> Sequence[AppSetting]:
        return self._settings.list_all()

    def is_date_locked(self) -> bool:
        """Whether students may only log hours for today.

        Reading never fails: a broken backend means the date stays unlocked.
        """
        try:
            setting = self._settings.get(LOCK_DATE_SETTING_KEY)
        except Exception:
            logger.exception("Could not read %s, assuming unlocked", LOCK_DATE_SETTING_KEY)
            return False
        return bool(setting and setting.enabled)

    def set_date_lock(self, *, current_role: Role, enabled: bool, updated_by: Optional[int]) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change settings")
        self._settings.save(
            LOCK_DATE_SETTING_KEY,
            "true" if enabled else "false",
            updated_by=updated_by,
            updated_at=now_local(),
        )
        logger.info("Setting %s=%s by %s", LOCK_DATE_SETTING_KEY, enabled, updated_by)
