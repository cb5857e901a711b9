from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from ..common.datetime_utils import format_clock_time
from ..common.hours import get_total_hours
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..time_entries.repository import TimeEntryRepository
from ..users.repository import StudentRepository

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TIMESHEET_COLUMNS = ["Date", "Start Time", "End Time", "Total Hours"]
CSV_COLUMNS = ["Student", "Date", "Start Time", "End Time", "Total Hours", "Project", "Description", "Status"]


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Only administrators can download reports")


class ReportService:
    """Spreadsheet and CSV exports of logged hours."""

    def __init__(self, entries: TimeEntryRepository, students: StudentRepository):
        self._entries = entries
        self._students = students

    def student_timesheet(
        self,
        *,
        current_role: Role,
        student_id: Optional[int],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ExportFile:
        _require_admin(current_role)
        if not student_id:
            raise ValidationError("Please select a student")

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")

        rows = self._entries.list_rows(student_id=student.id, date_from=date_from, date_to=date_to)
        if not rows:
            if date_from or date_to:
                raise ValidationError("No timesheet data found for selected date range")
            raise ValidationError("No timesheet data found for this student")

        entries = sorted((r.entry for r in rows), key=lambda e: (e.date, e.start_time))
        sheet = [
            {"Date": "Student:", "Start Time": student.name},
            {"Date": "Email:", "Start Time": student.email},
            {},
        ]
        sheet.extend(
            {
                "Date": e.date.isoformat(),
                "Start Time": format_clock_time(e.start_time),
                "End Time": format_clock_time(e.end_time),
                "Total Hours": float(e.total_hours),
            }
            for e in entries
        )
        sheet.append({})
        sheet.append({"Date": "TOTAL HOURS:", "Total Hours": str(get_total_hours(entries))})

        df = pd.DataFrame(sheet, columns=TIMESHEET_COLUMNS)
        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Timesheet")

        filename = re.sub(r"\s+", "_", student.name.strip()) + "_Timesheet.xlsx"
        return ExportFile(filename=filename, content=out.getvalue(), mimetype=XLSX_MIMETYPE)

    def entries_csv(self, *, current_role: Role, today: date) -> ExportFile:
        _require_admin(current_role)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_ALL)
        writer.writeheader()
        for r in self._entries.list_rows():
            e = r.entry
            writer.writerow(
                {
                    "Student": r.student_name,
                    "Date": e.date.isoformat(),
                    "Start Time": format_clock_time(e.start_time),
                    "End Time": format_clock_time(e.end_time),
                    "Total Hours": str(e.total_hours),
                    "Project": r.project_name or "",
                    "Description": e.description or "",
                    "Status": e.status.value,
                }
            )

        return ExportFile(
            filename=f"timesheet_{today.isoformat()}.csv",
            content=out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
        )
