from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceSortField, SortOrder
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, json_text
from .model import AttendanceLog, Session
from .repository import AttendanceRepository

_SORT_COLUMNS = {
    AttendanceSortField.DATE: "log_date",
    AttendanceSortField.TOTAL_MINUTES: "total_minutes",
}

_SELECT = """
    SELECT log_id, user_id, log_date, sessions, total_minutes, entry_exit_total_minutes, version
    FROM attendance_logs
"""


def sessions_to_json(sessions: Sequence[Session]) -> str:
    return json.dumps(
        [
            {
                "checkIn": s.check_in.isoformat(),
                "checkOut": s.check_out.isoformat() if s.check_out else None,
                "sessionMinutes": int(s.session_minutes),
            }
            for s in sessions
        ]
    )


def sessions_from_json(raw: Any) -> tuple[Session, ...]:
    items = json.loads(json_text(raw))
    return tuple(
        Session(
            check_in=datetime.fromisoformat(item["checkIn"]),
            check_out=datetime.fromisoformat(item["checkOut"]) if item.get("checkOut") else None,
            session_minutes=int(item.get("sessionMinutes") or 0),
        )
        for item in items
    )


def _row_to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        log_id=int(r["log_id"]),
        user_id=int(r["user_id"]),
        log_date=r["log_date"],
        sessions=sessions_from_json(r["sessions"]),
        total_minutes=int(r["total_minutes"]),
        entry_exit_total_minutes=int(r["entry_exit_total_minutes"]),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, log_date: date) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE user_id=%s AND log_date=%s", (int(user_id), log_date))
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def create_log(self, *, user_id: int, log_date: date, first_session: Session) -> AttendanceLog:
        sessions = (first_session,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(user_id, log_date, sessions, total_minutes, entry_exit_total_minutes, version)
                VALUES(%s,%s,%s,0,0,0)
                """,
                (int(user_id), log_date, sessions_to_json(sessions)),
            )
            log_id = int(cur.lastrowid)

        return AttendanceLog(log_id=log_id, user_id=int(user_id), log_date=log_date, sessions=sessions)

    def update_sessions(
        self,
        *,
        log_id: int,
        expected_version: int,
        sessions: Sequence[Session],
        total_minutes: int,
        entry_exit_total_minutes: int,
    ) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_logs
                SET sessions=%s, total_minutes=%s, entry_exit_total_minutes=%s, version=version+1
                WHERE log_id=%s AND version=%s
                """,
                (
                    sessions_to_json(sessions),
                    int(total_minutes),
                    int(entry_exit_total_minutes),
                    int(log_id),
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                return None

            cur.execute(_SELECT + " WHERE log_id=%s", (int(log_id),))
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def list_for_user(
        self,
        user_id: int,
        *,
        sort_field: AttendanceSortField,
        sort_order: SortOrder,
        offset: int,
        limit: int,
    ) -> Sequence[AttendanceLog]:
        # Column and direction come from enums, never from the request.
        column = _SORT_COLUMNS[sort_field]
        direction = "ASC" if sort_order == SortOrder.ASC else "DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f" WHERE user_id=%s ORDER BY {column} {direction}, log_id {direction} LIMIT %s OFFSET %s",
                (int(user_id), int(limit), int(offset)),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def count_for_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_logs WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
