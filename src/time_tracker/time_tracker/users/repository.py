from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AccountStatus, Role
from .model import Student


class StudentRepository(Protocol):
    """Repository interface for profiles in the ``students`` table.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Student]:
        raise NotImplementedError

    def create(self, *, auth_user_id: Optional[str], email: str, name: str, role: Role, first_login: bool = True) -> int:
        raise NotImplementedError

    def set_role(self, student_id: int, role: Role) -> bool:
        raise NotImplementedError

    def set_status(self, student_id: int, status: AccountStatus) -> bool:
        raise NotImplementedError

    def set_first_login(self, student_id: int, first_login: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError
