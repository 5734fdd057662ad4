from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.tokens import TokenClaims, TokenService
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_OTP_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Role, VerificationPurpose
from ..core.exceptions import DuplicateKeyError, MailDeliveryError, ValidationError
from ..core.result import ErrorKind, Result
from ..mailer.service import MailerService
from ..verification.service import INVALID_OTP_MESSAGE, VerificationService, parse_otp_length
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
RESET_OTP_SENT_MESSAGE = "Otp has been sent to your email successfully"


@dataclass(frozen=True)
class LoginPayload:
    user: User
    token: str

    def to_dict(self) -> dict:
        return {"user": self.user.to_dict(), "token": self.token}


@dataclass(frozen=True)
class DefaultAdmin:
    email: str
    password: str
    name: str = "Admin"

    @classmethod
    def from_dict(cls, data: dict) -> "DefaultAdmin":
        return cls(
            email=str(data.get("email", "admin@admin.com")),
            password=str(data.get("password", "")),
            name=str(data.get("name", "Admin")),
        )


class AuthService:
    """Use cases: login, sign-up, default admin, forgot/reset password."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        mailer: MailerService,
        verification: VerificationService,
        *,
        default_admin: Optional[DefaultAdmin] = None,
    ):
        self._users = users
        self._tokens = tokens
        self._mailer = mailer
        self._verification = verification
        self._default_admin = default_admin

    def login(self, email: Any, password: Any) -> Result[LoginPayload]:
        try:
            email = require_email(email)
            password = require_non_empty(password, "Password")
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            return Result.failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS_MESSAGE)

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False
        if not ok:
            return Result.failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS_MESSAGE)

        token = self._tokens.issue(TokenClaims(user_id=user.user_id, email=user.email, name=user.name, role=user.role))
        return Result.success("Login successful", LoginPayload(user=user, token=token))

    def create_user(self, email: Any, password: Any, name: Any) -> Result[User]:
        try:
            email = require_email(email)
            name = require_non_empty(name, "Name")
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        if self._users.get_by_email(email):
            return Result.failure(ErrorKind.CONFLICT, "User with this email already exists")

        try:
            user = self._users.create_user(
                email=email,
                name=name,
                password_hash=generate_password_hash(password),
                role=Role.USER,
            )
        except DuplicateKeyError:
            return Result.failure(ErrorKind.CONFLICT, "User with this email already exists")
        logger.info("Created user %s", user.user_id)

        try:
            self._mailer.send_welcome_email(user.email, user.name)
        except MailDeliveryError as e:
            # The account exists either way.
            logger.warning("Failed to send welcome email to user %s: %s", user.user_id, e)

        return Result.success("User created successfully", user, created=True)

    def create_default_admin(self) -> Result[User]:
        if self._default_admin is None or not self._default_admin.password:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, "Default admin is not configured")

        email = self._default_admin.email.strip().lower()
        existing = self._users.get_by_email(email)
        if existing:
            return Result.success("Default admin user already exists", existing)

        try:
            admin = self._users.create_user(
                email=email,
                name=self._default_admin.name,
                password_hash=generate_password_hash(self._default_admin.password),
                role=Role.ADMIN,
            )
        except DuplicateKeyError:
            existing = self._users.get_by_email(email)
            if existing is None:
                return Result.failure(ErrorKind.CONFLICT, "Default admin could not be created")
            return Result.success("Default admin user already exists", existing)

        logger.info("Created default admin user %s", admin.user_id)
        return Result.success("Default admin user created successfully", admin, created=True)

    def request_password_reset(self, email: Any, length: Any = None) -> Result[None]:
        try:
            email = require_email(email)
            # Checked before the lookup so bad input is rejected alike for every email.
            length = parse_otp_length(length)
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            # Same answer as the happy path so callers cannot probe for accounts.
            logger.info("Password reset requested for unknown account")
            return Result.success(RESET_OTP_SENT_MESSAGE)

        issued = self._verification.issue(user.email, VerificationPurpose.RESET_PASSWORD, length)
        if not issued.ok or issued.value is None:
            return Result.failure(issued.error or ErrorKind.INVALID_INPUT, issued.message)

        try:
            self._mailer.send_otp_email(user.email, issued.value.otp, issued.value.expires_in_minutes)
        except MailDeliveryError as e:
            logger.warning("Failed to send OTP email to user %s: %s", user.user_id, e)
            self._verification.revoke(user.email, VerificationPurpose.RESET_PASSWORD)
            return Result.failure(ErrorKind.DEPENDENCY_FAILURE, "Failed to send OTP email")

        return Result.success(RESET_OTP_SENT_MESSAGE)

    def reset_password(self, email: Any, otp: Any, new_password: Any) -> Result[None]:
        try:
            email = require_email(email)
            otp = require_min_length(require_non_empty(otp, "OTP"), "OTP", MIN_OTP_LENGTH)
            require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        user = self._users.get_by_email(email)
        if not user:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        verified = self._verification.verify(user.email, VerificationPurpose.RESET_PASSWORD, otp)
        if not verified.ok:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("Password reset for user %s", user.user_id)
        return Result.success("Password has been reset successfully")


class UserService:
    """Use case: read users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self) -> Result[list[User]]:
        users = list(self._users.list_all())
        if not users:
            return Result.failure(ErrorKind.NOT_FOUND, "No users found")
        return Result.success("Users fetched", users)
