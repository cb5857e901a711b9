from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AppSetting
from .repository import SettingsRepository


def _to_setting(row: dict) -> AppSetting:
    return AppSetting(
        key=row["setting_key"],
        value=str(row.get("setting_value") or ""),
        updated_by=row.get("updated_by"),
        updated_at=row.get("updated_at"),
    )


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[AppSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_key, setting_value, updated_by, updated_at FROM app_settings ORDER BY setting_key")
            return [_to_setting(r) for r in fetchall(cur)]

    def get(self, key: str) -> Optional[AppSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT setting_key, setting_value, updated_by, updated_at FROM app_settings WHERE setting_key=%s",
                (key,),
            )
            row = fetchone(cur)
            return _to_setting(row) if row else None

    def save(self, key: str, value: str, *, updated_by: Optional[int], updated_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value, updated_by, updated_at)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    setting_value=VALUES(setting_value),
                    updated_by=VALUES(updated_by),
                    updated_at=VALUES(updated_at)
                """,
                (key, value, updated_by, updated_at),
            )
