import csv
import io
from datetime import date

import pandas as pd
import pytest

from src.time_tracker.time_tracker.core.enums import EntryStatus, Role
from src.time_tracker.time_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.fakes import add_account, add_project_with_task, clock


@pytest.fixture
def sam(container):
    student = add_account(container, email="sam@example.com", password="secret1", name="Sam Lee", role=Role.STUDENT)
    project_id, task_id = add_project_with_task(container, student_id=student.id)
    repo = container.entries_repo
    repo.add(student_id=student.id, day=date(2025, 3, 3), start=clock("09:00"), end=clock("10:30"), hours="1.50",
             project_id=project_id, task_id=task_id)
    repo.add(student_id=student.id, day=date(2025, 3, 4), start=clock("13:00"), end=clock("15:15"), hours="2.25",
             project_id=project_id, task_id=task_id, status=EntryStatus.APPROVED)
    return student


def test_student_timesheet_layout(container, sam):
    export = container.report_service.student_timesheet(current_role=Role.ADMIN, student_id=sam.id)

    assert export.filename == "Sam_Lee_Timesheet.xlsx"
    df = pd.read_excel(io.BytesIO(export.content), sheet_name="Timesheet", dtype=str, keep_default_na=False)
    assert list(df.columns) == ["Date", "Start Time", "End Time", "Total Hours"]
    assert list(df["Date"][:2]) == ["Student:", "Email:"]
    assert df["Start Time"][0] == "Sam Lee"
    assert list(df["Date"][3:5]) == ["2025-03-03", "2025-03-04"]
    assert df["Date"].iloc[-1] == "TOTAL HOURS:"
    assert df["Total Hours"].iloc[-1] == "3.75"


def test_timesheet_date_range_without_rows(container, sam):
    with pytest.raises(ValidationError, match="selected date range"):
        container.report_service.student_timesheet(
            current_role=Role.ADMIN, student_id=sam.id, date_from=date(2025, 4, 1), date_to=date(2025, 4, 30)
        )


def test_timesheet_requires_student(container):
    with pytest.raises(ValidationError):
        container.report_service.student_timesheet(current_role=Role.ADMIN, student_id=None)
    with pytest.raises(NotFoundError):
        container.report_service.student_timesheet(current_role=Role.ADMIN, student_id=42)


def test_exports_are_admin_only(container, sam):
    with pytest.raises(AuthorizationError):
        container.report_service.entries_csv(current_role=Role.HR, today=date(2025, 3, 14))


def test_entries_csv(container, sam):
    export = container.report_service.entries_csv(current_role=Role.ADMIN, today=date(2025, 3, 14))

    assert export.filename == "timesheet_2025-03-14.csv"
    text = export.content.decode("utf-8-sig")
    rows = list(csv.DictReader(io.StringIO(text)))
    assert list(rows[0].keys()) == [
        "Student", "Date", "Start Time", "End Time", "Total Hours", "Project", "Description", "Status",
    ]
    assert rows[0]["Date"] == "2025-03-04"
    assert rows[0]["Status"] == "approved"
    assert rows[1]["Total Hours"] == "1.50"
    assert text.startswith('"Student"')
