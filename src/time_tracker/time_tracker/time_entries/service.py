from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_clock_time, parse_iso_date
from ..common.hours import calculate_and_round_hours, get_total_hours
from ..core.constants import LONG_DAY_HOURS
from ..core.enums import EntryStatus, Role
from ..core.exceptions import AuthorizationError, ConfirmationRequired, NotFoundError, ValidationError
from ..settings.service import SettingsService
from ..tasks.repository import TaskRepository
from .model import TimeEntry, TimeEntryRow
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)

DECIDED_STATUSES = frozenset({EntryStatus.APPROVED, EntryStatus.REJECTED})


@dataclass(frozen=True)
class StudentEntries:
    entries: Sequence[TimeEntry]
    total_hours: Decimal


def _parse_entry_date(value: str) -> date:
    v = (value or "").strip()
    if not v:
        raise ValidationError("Date is required")
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError("Date is not a valid date (YYYY-MM-DD)")


class TimeEntryService:
    """Student time logging plus the admin approval flow."""

    def __init__(
        self,
        entries: TimeEntryRepository,
        tasks: TaskRepository,
        settings: SettingsService,
        *,
        long_day_hours: float = LONG_DAY_HOURS,
    ):
        self._entries = entries
        self._tasks = tasks
        self._settings = settings
        self._long_day_hours = Decimal(str(long_day_hours))

    def _checked_hours(self, start_s: str, end_s: str, *, confirm_long: bool):
        start = parse_clock_time(start_s, "Start time")
        end = parse_clock_time(end_s, "End time")
        if end <= start:
            raise ValidationError("End time must be after start time. Please check your time entries.")

        total_hours = calculate_and_round_hours(start, end)
        if total_hours <= 0:
            raise ValidationError("Invalid time range. End time must be after start time.")
        if total_hours > self._long_day_hours and not confirm_long:
            raise ConfirmationRequired(
                f"You're logging {total_hours} hours. This seems like a very long work day. "
                "Are you sure this is correct?"
            )
        return start, end, total_hours

    def _own_pending_entry(self, *, student_id: int, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        if entry.student_id != int(student_id):
            raise AuthorizationError("You can only change your own time entries")
        if not entry.is_pending:
            raise ValidationError("Only pending entries can be changed")
        return entry

    def create_entry(
        self,
        *,
        student_id: int,
        entry_date: str,
        start_time: str,
        end_time: str,
        project_id: Optional[int],
        task_id: Optional[int],
        description: str = "",
        confirm_long: bool = False,
        now: Optional[datetime] = None,
    ) -> int:
        now = now or now_local()
        today = now.date()

        if self._settings.is_date_locked() and (entry_date or "").strip() != today.isoformat():
            raise ValidationError("You can only log hours for today.")

        if not (start_time or "").strip() or not (end_time or "").strip() or not project_id or not task_id:
            raise ValidationError("Please fill in all required fields including project and task")

        work_date = _parse_entry_date(entry_date)
        start, end, total_hours = self._checked_hours(start_time, end_time, confirm_long=confirm_long)

        task = self._tasks.get_by_id(int(task_id))
        if not task or not self._tasks.is_assigned(task.id, int(student_id)):
            raise ValidationError("The selected task is not assigned to you")
        if task.project_id != int(project_id):
            raise ValidationError("The selected task does not belong to the selected project")

        entry_id = self._entries.create(
            student_id=int(student_id),
            entry_date=work_date,
            start_time=start,
            end_time=end,
            total_hours=total_hours,
            project_id=int(project_id),
            task_id=task.id,
            description=(description or "").strip() or None,
        )
        logger.info("Time entry %s logged by student %s (%s h)", entry_id, student_id, total_hours)
        return entry_id

    def update_entry(
        self,
        *,
        student_id: int,
        entry_id: int,
        entry_date: str,
        start_time: str,
        end_time: str,
        description: str = "",
        confirm_long: bool = False,
        now: Optional[datetime] = None,
    ) -> None:
        now = now or now_local()
        entry = self._own_pending_entry(student_id=student_id, entry_id=entry_id)

        if not (start_time or "").strip() or not (end_time or "").strip():
            raise ValidationError("Please fill in all required fields")
        work_date = _parse_entry_date(entry_date)
        if self._settings.is_date_locked() and work_date != now.date():
            raise ValidationError("You can only log hours for today.")
        start, end, total_hours = self._checked_hours(start_time, end_time, confirm_long=confirm_long)

        self._entries.update(
            entry.id,
            entry_date=work_date,
            start_time=start,
            end_time=end,
            total_hours=total_hours,
            description=(description or "").strip() or None,
            updated_at=now,
        )

    def delete_entry(self, *, student_id: int, entry_id: int) -> None:
        entry = self._own_pending_entry(student_id=student_id, entry_id=entry_id)
        if not self._entries.delete_by_id(entry.id):
            raise NotFoundError("Time entry not found")
        logger.info("Time entry %s deleted by student %s", entry.id, student_id)

    def list_for_student(self, *, student_id: int, today_only: bool = False, now: Optional[datetime] = None) -> StudentEntries:
        on_date = (now or now_local()).date() if today_only else None
        entries = self._entries.list_for_student(int(student_id), on_date=on_date)
        return StudentEntries(entries=entries, total_hours=get_total_hours(entries))

    def list_rows(self, *, status: Optional[EntryStatus] = None) -> Sequence[TimeEntryRow]:
        return self._entries.list_rows(status=status)

    def set_status(
        self,
        *,
        current_role: Role,
        entry_id: int,
        status: str,
        override: bool = False,
        now: Optional[datetime] = None,
    ) -> None:
        """Approve or reject an entry.

        Pending entries move freely; an already decided entry only changes with
        ``override``. Nothing ever goes back to pending.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can approve time entries")
        try:
            new_status = EntryStatus(status)
        except ValueError:
            raise ValidationError("Invalid status")
        if new_status not in DECIDED_STATUSES:
            raise ValidationError("An entry can only be approved or rejected")

        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        if entry.status in DECIDED_STATUSES and not override:
            raise ConfirmationRequired(f"This entry is already {entry.status.value}. Change it anyway?")

        self._entries.set_status(entry.id, new_status, updated_at=now or now_local())
        logger.info("Time entry %s %s", entry.id, new_status.value)
