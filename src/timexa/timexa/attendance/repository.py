from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceSortField, SortOrder
from .model import AttendanceLog, Session


class AttendanceRepository(Protocol):
    """Store for day logs.

    Writes are conditional so the service's read-then-write never loses an
    update: creation relies on the (user_id, log_date) unique key and updates
    only apply while `version` is unchanged.
    """

    def get_for_user_and_date(self, user_id: int, log_date: date) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def create_log(self, *, user_id: int, log_date: date, first_session: Session) -> AttendanceLog:
        """Raises DuplicateKeyError if the day already has a log."""

        raise NotImplementedError

    def update_sessions(
        self,
        *,
        log_id: int,
        expected_version: int,
        sessions: Sequence[Session],
        total_minutes: int,
        entry_exit_total_minutes: int,
    ) -> Optional[AttendanceLog]:
        """Returns the saved log, or None if the row moved past expected_version."""

        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        sort_field: AttendanceSortField,
        sort_order: SortOrder,
        offset: int,
        limit: int,
    ) -> Sequence[AttendanceLog]:
        raise NotImplementedError

    def count_for_user(self, user_id: int) -> int:
        raise NotImplementedError
