from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.tokens import TokenService
from .core.constants import DEFAULT_JWT_EXPIRES_MINUTES, DEFAULT_MAX_SESSION_MINUTES, DEFAULT_OTP_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .mailer.service import MailConfig, MailerService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, DefaultAdmin, UserService
from .verification.mysql_verification_repository import MySQLVerificationRepository
from .verification.repository import VerificationRepository
from .verification.service import VerificationService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    verifications_repo: VerificationRepository

    mailer: MailerService
    tokens: TokenService

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    verification_service: VerificationService


def assemble(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    verifications_repo: VerificationRepository,
    mailer: MailerService,
    tokens: TokenService,
    default_admin: Optional[DefaultAdmin] = None,
    max_session_minutes: int = DEFAULT_MAX_SESSION_MINUTES,
    otp_max_attempts: int = DEFAULT_OTP_MAX_ATTEMPTS,
) -> Container:
    """Wire services over already-built repositories (tests pass in-memory ones)."""
    verification_service = VerificationService(verifications_repo, max_attempts=otp_max_attempts)
    auth_service = AuthService(
        users_repo,
        tokens,
        mailer,
        verification_service,
        default_admin=default_admin,
    )
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(attendance_repo, max_session_minutes=max_session_minutes)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        verifications_repo=verifications_repo,
        mailer=mailer,
        tokens=tokens,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        verification_service=verification_service,
    )


def build_container(
    *,
    db_config: dict,
    mail_config: dict,
    jwt_config: dict,
    default_admin: Optional[dict] = None,
    max_session_minutes: int = DEFAULT_MAX_SESSION_MINUTES,
    otp_max_attempts: int = DEFAULT_OTP_MAX_ATTEMPTS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    tokens = TokenService(
        str(jwt_config.get("secret", "")),
        algorithm=str(jwt_config.get("algorithm", "HS256")),
        expires_minutes=int(jwt_config.get("expires_minutes", DEFAULT_JWT_EXPIRES_MINUTES)),
    )

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        verifications_repo=MySQLVerificationRepository(conn),
        mailer=MailerService(MailConfig.from_dict(mail_config)),
        tokens=tokens,
        default_admin=DefaultAdmin.from_dict(default_admin) if default_admin else None,
        max_session_minutes=max_session_minutes,
        otp_max_attempts=otp_max_attempts,
    )
