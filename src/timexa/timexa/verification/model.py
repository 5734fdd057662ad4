from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import VerificationPurpose, VerificationStatus


@dataclass(frozen=True)
class VerificationRecord:
    """A stored OTP. Only the hash of the code is ever kept."""

    verification_id: int
    identifier: str
    purpose: VerificationPurpose
    hashed_value: str
    expires_at: datetime
    attempt_count: int
    status: VerificationStatus
    created_at: datetime


@dataclass(frozen=True)
class IssuedOtp:
    """Returned once by issue(); `otp` is the plaintext for out-of-band delivery."""

    otp: str
    record: VerificationRecord
    expires_in_minutes: int
