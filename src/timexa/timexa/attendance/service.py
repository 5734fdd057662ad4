from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local, whole_minutes_between
from ..common.validators import clamp, parse_int
from ..core.constants import DEFAULT_MAX_SESSION_MINUTES, DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import AttendanceSortField, SortOrder
from ..core.exceptions import DuplicateKeyError, ValidationError
from ..core.result import ErrorKind, Result
from .model import AttendanceLog, LogPage, PageMeta, Session
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: check-in/check-out sessions per user per day.

    Day-log state machine: NO_LOG -> OPEN_SESSION -> CLOSED_SESSION -> OPEN_SESSION ...
    Only NO_LOG and CLOSED_SESSION accept check-in; only OPEN_SESSION accepts check-out.
    """

    def __init__(self, attendance: AttendanceRepository, *, max_session_minutes: int = DEFAULT_MAX_SESSION_MINUTES):
        self._attendance = attendance
        self._max_session_minutes = int(max_session_minutes)

    def check_in(self, user_id: int, *, now: Optional[datetime] = None) -> Result[AttendanceLog]:
        now = now or now_local()
        today = now.date()

        log = self._attendance.get_for_user_and_date(user_id, today)
        if log is None:
            try:
                created = self._attendance.create_log(
                    user_id=user_id,
                    log_date=today,
                    first_session=Session(check_in=now),
                )
                return Result.success("Check-in successful", created, created=True)
            except DuplicateKeyError:
                # Another request created today's log first.
                log = self._attendance.get_for_user_and_date(user_id, today)
                if log is None:
                    return Result.failure(ErrorKind.CONFLICT, "Attendance log changed, please retry.")

        if log.has_open_session:
            return Result.failure(ErrorKind.CONFLICT, "Already checked in.")

        saved = self._attendance.update_sessions(
            log_id=log.log_id,
            expected_version=log.version,
            sessions=log.sessions + (Session(check_in=now),),
            total_minutes=log.total_minutes,
            entry_exit_total_minutes=log.entry_exit_total_minutes,
        )
        if saved is None:
            return Result.failure(ErrorKind.CONFLICT, "Attendance log changed, please retry.")
        return Result.success("Check-in successful", saved)

    def check_out(self, user_id: int, *, now: Optional[datetime] = None) -> Result[AttendanceLog]:
        now = now or now_local()
        today = now.date()

        log = self._attendance.get_for_user_and_date(user_id, today)
        if log is None:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, "Cannot checkout before check-in.")

        last = log.last_session
        first = log.first_session
        if last is None or first is None or not last.is_open:
            return Result.failure(ErrorKind.PRECONDITION_FAILED, "Already checked out.")

        session_minutes = whole_minutes_between(last.check_in, now)
        if session_minutes > self._max_session_minutes:
            logger.warning(
                "Rejected checkout for user %s: open session of %s minutes exceeds %s",
                user_id,
                session_minutes,
                self._max_session_minutes,
            )
            return Result.failure(
                ErrorKind.PRECONDITION_FAILED,
                "Session exceeds the maximum allowed length. Please contact an administrator.",
            )

        closed = replace(last, check_out=now, session_minutes=session_minutes)
        saved = self._attendance.update_sessions(
            log_id=log.log_id,
            expected_version=log.version,
            sessions=log.sessions[:-1] + (closed,),
            total_minutes=log.total_minutes + session_minutes,
            entry_exit_total_minutes=whole_minutes_between(first.check_in, now),
        )
        if saved is None:
            return Result.failure(ErrorKind.CONFLICT, "Attendance log changed, please retry.")
        return Result.success("Check-out successful", saved)

    def get_today(self, user_id: int, *, now: Optional[datetime] = None) -> Result[AttendanceLog]:
        today = (now or now_local()).date()
        log = self._attendance.get_for_user_and_date(user_id, today)
        if log is None:
            return Result.failure(ErrorKind.NOT_FOUND, "No attendance log for today.")
        return Result.success("Attendance log fetched", log)

    def list_logs(
        self,
        user_id: int,
        page: Any = None,
        page_size: Any = None,
        sort_field: Any = None,
        sort_direction: Any = None,
    ) -> Result[LogPage]:
        try:
            page_n = max(1, parse_int(page, "page", default=DEFAULT_PAGE))
            size_n = clamp(parse_int(page_size, "limit", default=DEFAULT_PAGE_SIZE), 1, MAX_PAGE_SIZE)
            field = _parse_enum(AttendanceSortField, sort_field, AttendanceSortField.DATE, "sortBy")
            order = _parse_enum(SortOrder, sort_direction, SortOrder.DESC, "sortOrder")
        except ValidationError as e:
            return Result.failure(ErrorKind.INVALID_INPUT, str(e))

        total_records = self._attendance.count_for_user(user_id)
        total_pages = math.ceil(total_records / size_n)
        items = self._attendance.list_for_user(
            user_id,
            sort_field=field,
            sort_order=order,
            offset=(page_n - 1) * size_n,
            limit=size_n,
        )

        meta = PageMeta(
            current_page=page_n,
            page_size=size_n,
            total_pages=total_pages,
            total_records=total_records,
            has_next_page=page_n < total_pages,
            has_previous_page=page_n > 1,
        )
        return Result.success("Attendance logs fetched", LogPage(items=list(items), meta=meta))


def _parse_enum(enum_cls, value: Any, default, field_name: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    candidate = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == candidate:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"{field_name} must be one of: {allowed}")
