from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    STUDENT = "student"
    ADMIN = "admin"
    HR = "hr"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EntryStatus(str, Enum):
    """Approval state of a time entry."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RecipientStatus(str, Enum):
    """Per-row state of a rejection email batch."""

    PENDING = "pending"
    ALREADY_SENT = "alreadySent"
    SUCCESS = "success"
    FAILED = "failed"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    USER_UPDATED = "USER_UPDATED"
