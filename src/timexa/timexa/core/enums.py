from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    USER = "user"


class VerificationPurpose(str, Enum):
    """Workflow an OTP is bound to. Each purpose has its own expiry."""

    RESET_PASSWORD = "RESET_PASSWORD"
    VERIFY_EMAIL = "VERIFY_EMAIL"
    VERIFY_PHONE = "VERIFY_PHONE"


class VerificationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"


class AttendanceSortField(str, Enum):
    DATE = "date"
    TOTAL_MINUTES = "totalMinutes"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


OTP_EXPIRY_BY_PURPOSE: dict[VerificationPurpose, int] = {
    VerificationPurpose.RESET_PASSWORD: 5,
    VerificationPurpose.VERIFY_EMAIL: 10,
    VerificationPurpose.VERIFY_PHONE: 5,
}
