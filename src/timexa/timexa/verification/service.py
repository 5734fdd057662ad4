from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import parse_int, require_non_empty
from ..core.constants import (
    DEFAULT_OTP_EXPIRY_MINUTES,
    DEFAULT_OTP_LENGTH,
    DEFAULT_OTP_MAX_ATTEMPTS,
    MAX_OTP_LENGTH,
    MIN_OTP_LENGTH,
)
from ..core.enums import OTP_EXPIRY_BY_PURPOSE, VerificationPurpose
from ..core.exceptions import ValidationError
from ..core.result import ErrorKind, Result
from .model import IssuedOtp
from .repository import VerificationRepository

logger = logging.getLogger(__name__)

INVALID_OTP_MESSAGE = "Invalid or expired OTP"


def generate_otp(length: int) -> str:
    """Numeric code; every digit drawn independently and uniformly from 0-9."""
    return "".join(secrets.choice(string.digits) for _ in range(length))


def parse_otp_length(length: Any) -> int:
    """Raises ValidationError unless length is a number in the allowed range."""
    length_n = parse_int(length, "Length", default=DEFAULT_OTP_LENGTH)
    if not MIN_OTP_LENGTH <= length_n <= MAX_OTP_LENGTH:
        raise ValidationError(f"Length must be between {MIN_OTP_LENGTH} and {MAX_OTP_LENGTH}")
    return length_n


class VerificationService:
    """Use case: single-use, time-boxed, attempt-limited OTPs.

    At most one ACTIVE code exists per (identifier, purpose). Verification
    failures all look the same to the caller, whatever the cause.
    """

    def __init__(
        self,
        verifications: VerificationRepository,
        *,
        max_attempts: int = DEFAULT_OTP_MAX_ATTEMPTS,
        expiry_by_purpose: Optional[Mapping[VerificationPurpose, int]] = None,
    ):
        self._verifications = verifications
        self._max_attempts = int(max_attempts)
        self._expiry_by_purpose = dict(expiry_by_purpose or OTP_EXPIRY_BY_PURPOSE)

    def expiry_minutes(self, purpose: VerificationPurpose) -> int:
        return self._expiry_by_purpose.get(purpose, DEFAULT_OTP_EXPIRY_MINUTES)

    def issue(
        self,
        identifier: str,
        purpose: VerificationPurpose,
        length: Any = None,
        *,
        now: Optional[datetime] = None,
    ) -> Result[IssuedOtp]:
        try:
            identifier = require_non_empty(identifier, "Identifier")
            length_n = parse_otp_length(length)
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        now = now or now_local()
        self._verifications.delete_expired(now=now)
        replaced = self._verifications.delete_active(identifier=identifier, purpose=purpose)
        if replaced:
            logger.info("Invalidated %s active %s code(s) before reissue", replaced, purpose.value)

        otp = generate_otp(length_n)
        minutes = self.expiry_minutes(purpose)
        record = self._verifications.create(
            identifier=identifier,
            purpose=purpose,
            hashed_value=generate_password_hash(otp),
            expires_at=now + timedelta(minutes=minutes),
            created_at=now,
        )
        return Result.success("OTP issued", IssuedOtp(otp=otp, record=record, expires_in_minutes=minutes), created=True)

    def verify(
        self,
        identifier: str,
        purpose: VerificationPurpose,
        candidate: str,
        *,
        now: Optional[datetime] = None,
    ) -> Result[None]:
        now = now or now_local()
        if not identifier or not candidate:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        record = self._verifications.find_latest_active(
            identifier=identifier,
            purpose=purpose,
            now=now,
            max_attempts=self._max_attempts,
        )
        if record is None:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        if not check_password_hash(record.hashed_value, candidate):
            self._verifications.increment_attempts(
                verification_id=record.verification_id,
                max_attempts=self._max_attempts,
            )
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        # Single use: only the request whose delete hits the row wins.
        if not self._verifications.consume(
            verification_id=record.verification_id,
            now=now,
            max_attempts=self._max_attempts,
        ):
            return Result.failure(ErrorKind.PRECONDITION_FAILED, INVALID_OTP_MESSAGE)

        return Result.success("OTP verified")

    def revoke(self, identifier: str, purpose: VerificationPurpose) -> int:
        return self._verifications.delete_active(identifier=identifier, purpose=purpose)

    def purge_expired(self, *, now: Optional[datetime] = None) -> int:
        return self._verifications.delete_expired(now=now or now_local())
