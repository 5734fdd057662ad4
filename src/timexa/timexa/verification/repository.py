from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import VerificationPurpose
from .model import VerificationRecord


class VerificationRepository(Protocol):
    def delete_active(self, *, identifier: str, purpose: VerificationPurpose) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        identifier: str,
        purpose: VerificationPurpose,
        hashed_value: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> VerificationRecord:
        """Store a new ACTIVE record with attempt_count 0."""

        raise NotImplementedError

    def find_latest_active(
        self,
        *,
        identifier: str,
        purpose: VerificationPurpose,
        now: datetime,
        max_attempts: int,
    ) -> Optional[VerificationRecord]:
        """Newest ACTIVE record with expires_at > now and attempt_count < max_attempts."""

        raise NotImplementedError

    def increment_attempts(self, *, verification_id: int, max_attempts: int) -> bool:
        raise NotImplementedError

    def consume(self, *, verification_id: int, now: datetime, max_attempts: int) -> bool:
        """Delete the record only if it is still matchable; True for exactly one caller."""

        raise NotImplementedError

    def delete_expired(self, *, now: datetime) -> int:
        raise NotImplementedError
