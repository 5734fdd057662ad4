from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import VerificationPurpose, VerificationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import VerificationRecord
from .repository import VerificationRepository

_SELECT = """
    SELECT verification_id, identifier, purpose, hashed_value, expires_at, attempt_count, status, created_at
    FROM verifications
"""


def _row_to_record(r: dict) -> VerificationRecord:
    return VerificationRecord(
        verification_id=int(r["verification_id"]),
        identifier=r["identifier"],
        purpose=VerificationPurpose(r["purpose"]),
        hashed_value=r["hashed_value"],
        expires_at=r["expires_at"],
        attempt_count=int(r["attempt_count"]),
        status=VerificationStatus(r["status"]),
        created_at=r["created_at"],
    )


class MySQLVerificationRepository(VerificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def delete_active(self, *, identifier: str, purpose: VerificationPurpose) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM verifications WHERE identifier=%s AND purpose=%s AND status=%s",
                (identifier, purpose.value, VerificationStatus.ACTIVE.value),
            )
            return int(cur.rowcount)

    def create(
        self,
        *,
        identifier: str,
        purpose: VerificationPurpose,
        hashed_value: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> VerificationRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # A concurrent issuance may have slipped an ACTIVE row in after
            # delete_active(); the unique key turns that into a replacement.
            cur.execute(
                """
                INSERT INTO verifications(identifier, purpose, hashed_value, expires_at, attempt_count, status, created_at)
                VALUES(%s,%s,%s,%s,0,%s,%s) AS new
                ON DUPLICATE KEY UPDATE
                    verification_id=LAST_INSERT_ID(verifications.verification_id),
                    hashed_value=new.hashed_value,
                    expires_at=new.expires_at,
                    attempt_count=0,
                    created_at=new.created_at
                """,
                (identifier, purpose.value, hashed_value, expires_at, VerificationStatus.ACTIVE.value, created_at),
            )
            verification_id = int(cur.lastrowid)

        return VerificationRecord(
            verification_id=verification_id,
            identifier=identifier,
            purpose=purpose,
            hashed_value=hashed_value,
            expires_at=expires_at,
            attempt_count=0,
            status=VerificationStatus.ACTIVE,
            created_at=created_at,
        )

    def find_latest_active(
        self,
        *,
        identifier: str,
        purpose: VerificationPurpose,
        now: datetime,
        max_attempts: int,
    ) -> Optional[VerificationRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE identifier=%s AND purpose=%s AND status=%s AND expires_at > %s AND attempt_count < %s
                ORDER BY created_at DESC, verification_id DESC
                LIMIT 1
                """,
                (identifier, purpose.value, VerificationStatus.ACTIVE.value, now, int(max_attempts)),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def increment_attempts(self, *, verification_id: int, max_attempts: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE verifications
                SET attempt_count = attempt_count + 1
                WHERE verification_id=%s AND attempt_count < %s
                """,
                (int(verification_id), int(max_attempts)),
            )
            return cur.rowcount > 0

    def consume(self, *, verification_id: int, now: datetime, max_attempts: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM verifications
                WHERE verification_id=%s AND status=%s AND expires_at > %s AND attempt_count < %s
                """,
                (int(verification_id), VerificationStatus.ACTIVE.value, now, int(max_attempts)),
            )
            return cur.rowcount > 0

    def delete_expired(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM verifications WHERE expires_at <= %s", (now,))
            return int(cur.rowcount)
