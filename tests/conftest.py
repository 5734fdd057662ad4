from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

os.environ.setdefault("APP_ENV", "testing")

from src.timexa.timexa.attendance.model import AttendanceLog, Session
from src.timexa.timexa.common.tokens import TokenService
from src.timexa.timexa.container import assemble
from src.timexa.timexa.core.enums import (
    AttendanceSortField,
    Role,
    SortOrder,
    VerificationStatus,
)
from src.timexa.timexa.core.exceptions import DuplicateKeyError, MailDeliveryError
from src.timexa.timexa.mailer.service import DeliveryReceipt
from src.timexa.timexa.users.model import User
from src.timexa.timexa.users.service import DefaultAdmin
from src.timexa.timexa.verification.model import VerificationRecord


class InMemoryAttendance:
    def __init__(self):
        self._by_user_date: dict[tuple[int, date], AttendanceLog] = {}
        self._id = 0
        self.writes = 0

    def get_for_user_and_date(self, user_id: int, log_date: date) -> Optional[AttendanceLog]:
        return self._by_user_date.get((user_id, log_date))

    def create_log(self, *, user_id: int, log_date: date, first_session: Session) -> AttendanceLog:
        if (user_id, log_date) in self._by_user_date:
            raise DuplicateKeyError("uq_attendance_user_date")
        self._id += 1
        self.writes += 1
        log = AttendanceLog(log_id=self._id, user_id=user_id, log_date=log_date, sessions=(first_session,))
        self._by_user_date[(user_id, log_date)] = log
        return log

    def update_sessions(self, *, log_id, expected_version, sessions, total_minutes, entry_exit_total_minutes):
        for key, log in self._by_user_date.items():
            if log.log_id == log_id:
                if log.version != expected_version:
                    return None
                saved = replace(
                    log,
                    sessions=tuple(sessions),
                    total_minutes=total_minutes,
                    entry_exit_total_minutes=entry_exit_total_minutes,
                    version=log.version + 1,
                )
                self._by_user_date[key] = saved
                self.writes += 1
                return saved
        return None

    def list_for_user(self, user_id: int, *, sort_field, sort_order, offset: int, limit: int) -> Sequence[AttendanceLog]:
        items = [log for log in self._by_user_date.values() if log.user_id == user_id]
        if sort_field == AttendanceSortField.TOTAL_MINUTES:
            key = lambda log: (log.total_minutes, log.log_id)
        else:
            key = lambda log: (log.log_date, log.log_id)
        items.sort(key=key, reverse=sort_order == SortOrder.DESC)
        return items[offset : offset + limit]

    def count_for_user(self, user_id: int) -> int:
        return sum(1 for log in self._by_user_date.values() if log.user_id == user_id)

    # test helper
    def seed(self, log: AttendanceLog) -> None:
        self._id = max(self._id, log.log_id)
        self._by_user_date[(log.user_id, log.log_date)] = log


class InMemoryVerifications:
    def __init__(self):
        self.records: dict[int, VerificationRecord] = {}
        self._id = 0

    def delete_active(self, *, identifier, purpose) -> int:
        doomed = [
            rid
            for rid, r in self.records.items()
            if r.identifier == identifier and r.purpose == purpose and r.status == VerificationStatus.ACTIVE
        ]
        for rid in doomed:
            del self.records[rid]
        return len(doomed)

    def create(self, *, identifier, purpose, hashed_value, expires_at, created_at) -> VerificationRecord:
        self._id += 1
        record = VerificationRecord(
            verification_id=self._id,
            identifier=identifier,
            purpose=purpose,
            hashed_value=hashed_value,
            expires_at=expires_at,
            attempt_count=0,
            status=VerificationStatus.ACTIVE,
            created_at=created_at,
        )
        self.records[self._id] = record
        return record

    def _matchable(self, r: VerificationRecord, now: datetime, max_attempts: int) -> bool:
        return r.status == VerificationStatus.ACTIVE and r.expires_at > now and r.attempt_count < max_attempts

    def find_latest_active(self, *, identifier, purpose, now, max_attempts) -> Optional[VerificationRecord]:
        matches = [
            r
            for r in self.records.values()
            if r.identifier == identifier and r.purpose == purpose and self._matchable(r, now, max_attempts)
        ]
        matches.sort(key=lambda r: (r.created_at, r.verification_id), reverse=True)
        return matches[0] if matches else None

    def increment_attempts(self, *, verification_id, max_attempts) -> bool:
        r = self.records.get(verification_id)
        if not r or r.attempt_count >= max_attempts:
            return False
        self.records[verification_id] = replace(r, attempt_count=r.attempt_count + 1)
        return True

    def consume(self, *, verification_id, now, max_attempts) -> bool:
        r = self.records.get(verification_id)
        if not r or not self._matchable(r, now, max_attempts):
            return False
        del self.records[verification_id]
        return True

    def delete_expired(self, *, now) -> int:
        doomed = [rid for rid, r in self.records.items() if r.expires_at <= now]
        for rid in doomed:
            del self.records[rid]
        return len(doomed)


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._id = 0

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email, name, password_hash, role) -> User:
        if self.get_by_email(email):
            raise DuplicateKeyError("uq_users_email")
        self._id += 1
        user = User(user_id=self._id, email=email, name=name, password_hash=password_hash, role=role)
        self.users[self._id] = user
        return user

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        user = self.users.get(user_id)
        if not user:
            return False
        self.users[user_id] = replace(user, password_hash=password_hash)
        return True

    def list_all(self):
        return sorted(self.users.values(), key=lambda u: u.user_id)


class FakeMailer:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def _deliver(self, to, subject, template, context):
        if self.fail:
            raise MailDeliveryError("SMTP down")
        self.sent.append({"to": to, "subject": subject, "template": template, "context": context})
        return DeliveryReceipt(message_id=f"<{len(self.sent)}@test>", delivered=True)

    def send(self, to, subject, template, context=None):
        return self._deliver(to, subject, template, context or {})

    def send_welcome_email(self, to, name):
        return self._deliver(to, "Welcome to Timexa!", "welcome", {"name": name})

    def send_otp_email(self, to, otp, expires_in_minutes):
        return self._deliver(to, "Your Timexa OTP Code", "otp", {"otp": otp, "minutes": expires_in_minutes})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 6, 9, 0, 0)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def verifications_repo() -> InMemoryVerifications:
    return InMemoryVerifications()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("test-jwt-secret", expires_minutes=60)


@pytest.fixture
def container(users_repo, attendance_repo, verifications_repo, mailer, tokens):
    return assemble(
        conn=None,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        verifications_repo=verifications_repo,
        mailer=mailer,
        tokens=tokens,
        default_admin=DefaultAdmin(email="admin@admin.com", password="Admin@123"),
    )


@pytest.fixture
def app(container):
    from src.timexa.timexa.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(users_repo):
    def _make(email: str, *, role: Role = Role.USER, password: str = "secret123") -> User:
        return users_repo.create_user(
            email=email,
            name=email.split("@")[0],
            password_hash=generate_password_hash(password),
            role=role,
        )

    return _make
