from __future__ import annotations

import logging
import secrets
import string
from typing import Sequence

from ..auth.repository import AuthUserRepository
from ..auth.service import AuthService
from ..common.validators import is_valid_email, normalize_email
from ..core.constants import GENERATED_PASSWORD_LENGTH, MIN_ACCOUNT_PASSWORD_LENGTH
from ..core.enums import AccountStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..time_entries.repository import TimeEntryRepository
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits

# Which roles each manager may hand out.
CREATABLE_ROLES = {
    Role.ADMIN: frozenset(Role),
    Role.HR: frozenset({Role.STUDENT}),
}


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class UserService:
    """Use case: manage accounts (admin, and HR for students)."""

    def __init__(
        self,
        students: StudentRepository,
        auth: AuthService,
        auth_users: AuthUserRepository,
        entries: TimeEntryRepository,
    ):
        self._students = students
        self._auth = auth
        self._auth_users = auth_users
        self._entries = entries

    def list_users(self) -> Sequence[Student]:
        return self._students.list_all()

    def list_students(self) -> Sequence[Student]:
        return self._students.list_by_role(Role.STUDENT)

    def create_user(self, *, current_role: Role, name: str, email: str, password: str, role: Role) -> Student:
        allowed = CREATABLE_ROLES.get(current_role)
        if not allowed:
            raise AuthorizationError("You do not have permission to create users")
        if role not in allowed:
            raise AuthorizationError(
                "HR users can only create Student accounts. "
                "Please contact an Administrator to create HR or Admin accounts."
            )

        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("Please fill in all fields")
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address")
        if len(password) < MIN_ACCOUNT_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_ACCOUNT_PASSWORD_LENGTH} characters long")

        student = self._auth.sign_up(email, password, name=name, role=role, email_confirmed=True)
        logger.info("%s account %s created by %s", role.value, student.id, current_role.value)
        return student

    def delete_user(self, *, current_role: Role, current_student_id: int, student_id: int) -> None:
        """Remove time entries, then the profile, then the login.

        Three separate writes without a transaction around them.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can delete users")
        if int(student_id) == int(current_student_id):
            raise ValidationError("You cannot delete your own account")

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("User not found")

        removed = self._entries.delete_for_student(student.id)
        if not self._students.delete_by_id(student.id):
            raise NotFoundError("User not found")
        if student.auth_user_id:
            self._auth_users.delete(student.auth_user_id)
        logger.info("Deleted user %s and %d time entries", student.id, removed)

    def set_role(self, *, current_role: Role, student_id: int, role: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change roles")
        try:
            new_role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role")
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("User not found")
        self._students.set_role(student.id, new_role)
        logger.info("User %s role set to %s", student.id, new_role.value)

    def toggle_status(self, *, current_role: Role, student_id: int) -> AccountStatus:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change the account status")
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("User not found")

        new_status = AccountStatus.INACTIVE if student.is_active else AccountStatus.ACTIVE
        self._students.set_status(student.id, new_status)
        logger.info("User %s is now %s", student.id, new_status.value)
        return new_status
