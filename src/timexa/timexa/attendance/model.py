from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence


@dataclass(frozen=True)
class Session:
    """One check-in/check-out pair within a day's log."""

    check_in: datetime
    check_out: Optional[datetime] = None
    session_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.check_out is None

    def to_dict(self) -> dict:
        return {
            "checkIn": self.check_in.isoformat(),
            "checkOut": self.check_out.isoformat() if self.check_out else None,
            "sessionMinutes": self.session_minutes,
        }


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one user's attendance for one calendar day.

    Invariant: at most one session is open, and only the last one may be.
    """

    log_id: int
    user_id: int
    log_date: date
    sessions: tuple[Session, ...]
    total_minutes: int = 0
    entry_exit_total_minutes: int = 0
    version: int = 0

    @property
    def first_session(self) -> Optional[Session]:
        return self.sessions[0] if self.sessions else None

    @property
    def last_session(self) -> Optional[Session]:
        return self.sessions[-1] if self.sessions else None

    @property
    def has_open_session(self) -> bool:
        last = self.last_session
        return last is not None and last.is_open

    def to_dict(self) -> dict:
        return {
            "id": str(self.log_id),
            "userId": str(self.user_id),
            "date": self.log_date.isoformat(),
            "sessions": [s.to_dict() for s in self.sessions],
            "totalMinutes": self.total_minutes,
            "entryExitTotalMinutes": self.entry_exit_total_minutes,
        }


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    page_size: int
    total_pages: int
    total_records: int
    has_next_page: bool
    has_previous_page: bool

    def to_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
            "totalRecords": self.total_records,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }


@dataclass(frozen=True)
class LogPage:
    items: Sequence[AttendanceLog]
    meta: PageMeta

    def to_dict(self) -> dict:
        return {
            "logs": [log.to_dict() for log in self.items],
            "pagination": self.meta.to_dict(),
        }
