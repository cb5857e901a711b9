from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .auth.events import AuthEventBus
from .auth.mysql_auth_repository import MySQLAuthUserRepository
from .auth.repository import AuthUserRepository
from .auth.service import AuthService
from .auth.tokens import RecoveryTokenSigner
from .core.constants import DEFAULT_EMAIL_SEND_DELAY_SECONDS, DEFAULT_RESET_TOKEN_MAX_AGE, LONG_DAY_HOURS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .hr.batch_store import BatchStore
from .hr.history import SentHistoryStore
from .hr.service import RejectionEmailService
from .mail.sender import EmailSender, LoggingEmailSender, ResendEmailSender
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .reports.service import ReportService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .time_entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .time_entries.repository import TimeEntryRepository
from .time_entries.service import TimeEntryService
from .users.mysql_student_repository import MySQLStudentRepository
from .users.repository import StudentRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    auth_users_repo: AuthUserRepository
    projects_repo: ProjectRepository
    tasks_repo: TaskRepository
    entries_repo: TimeEntryRepository
    settings_repo: SettingsRepository

    auth_events: AuthEventBus
    mailer: EmailSender

    auth_service: AuthService
    user_service: UserService
    project_service: ProjectService
    task_service: TaskService
    settings_service: SettingsService
    time_entry_service: TimeEntryService
    report_service: ReportService
    dashboard_service: DashboardService
    rejection_email_service: RejectionEmailService


def build_email_sender(settings: Mapping) -> EmailSender:
    mode = str(settings.get("EMAIL_MODE", "log")).lower()
    if mode == "resend":
        api_key = settings.get("RESEND_API_KEY")
        if not api_key:
            raise RuntimeError("EMAIL_MODE=resend requires RESEND_API_KEY")
        return ResendEmailSender(
            api_key=str(api_key),
            sender=str(settings.get("EMAIL_FROM", "onboarding@resend.dev")),
            timeout=float(settings.get("EMAIL_TIMEOUT_SECONDS", 10)),
        )
    if mode != "log":
        raise RuntimeError(f"Unknown EMAIL_MODE: {mode!r}")
    return LoggingEmailSender()


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    students_repo: StudentRepository,
    auth_users_repo: AuthUserRepository,
    projects_repo: ProjectRepository,
    tasks_repo: TaskRepository,
    entries_repo: TimeEntryRepository,
    settings_repo: SettingsRepository,
    mailer: EmailSender,
    settings: Mapping,
    sleep=None,
) -> Container:
    """Build every service on top of the given repositories.

    Shared by the MySQL container and by tests that pass in-memory fakes.
    """
    auth_events = AuthEventBus()
    tokens = RecoveryTokenSigner(
        str(settings["SECRET_KEY"]),
        max_age=int(settings.get("RESET_TOKEN_MAX_AGE", DEFAULT_RESET_TOKEN_MAX_AGE)),
    )
    auth_service = AuthService(
        auth_users_repo,
        students_repo,
        tokens=tokens,
        mailer=mailer,
        events=auth_events,
        base_url=str(settings.get("APP_BASE_URL", "http://localhost:5000")),
    )
    settings_service = SettingsService(settings_repo)

    data_dir = Path(str(settings.get("DATA_DIR", "instance")))
    hr_kwargs = {"delay_seconds": float(settings.get("EMAIL_SEND_DELAY_SECONDS", DEFAULT_EMAIL_SEND_DELAY_SECONDS))}
    if sleep is not None:
        hr_kwargs["sleep"] = sleep

    return Container(
        conn=conn,
        students_repo=students_repo,
        auth_users_repo=auth_users_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        entries_repo=entries_repo,
        settings_repo=settings_repo,
        auth_events=auth_events,
        mailer=mailer,
        auth_service=auth_service,
        user_service=UserService(students_repo, auth_service, auth_users_repo, entries_repo),
        project_service=ProjectService(projects_repo),
        task_service=TaskService(tasks_repo),
        settings_service=settings_service,
        time_entry_service=TimeEntryService(
            entries_repo,
            tasks_repo,
            settings_service,
            long_day_hours=float(settings.get("LONG_DAY_HOURS", LONG_DAY_HOURS)),
        ),
        report_service=ReportService(entries_repo, students_repo),
        dashboard_service=DashboardService(students_repo, projects_repo, tasks_repo, entries_repo),
        rejection_email_service=RejectionEmailService(
            SentHistoryStore(data_dir / "hr_email_sent_history.json"),
            BatchStore(data_dir / "hr_batches"),
            mailer,
            **hr_kwargs,
        ),
    )


def build_container(*, db_config: dict, settings: Mapping) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_services(
        conn=conn,
        students_repo=MySQLStudentRepository(conn),
        auth_users_repo=MySQLAuthUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        entries_repo=MySQLTimeEntryRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        mailer=build_email_sender(settings),
        settings=settings,
    )
