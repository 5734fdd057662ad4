from __future__ import annotations

from datetime import date, datetime, timedelta

from src.timexa.timexa.attendance.model import AttendanceLog, Session
from src.timexa.timexa.attendance.service import AttendanceService
from src.timexa.timexa.core.exceptions import DuplicateKeyError
from src.timexa.timexa.core.result import ErrorKind


def _at(hh: int, mm: int) -> datetime:
    return datetime(2025, 1, 6, hh, mm)


def test_two_sessions_accumulate_worked_and_span_minutes(attendance_repo):
    svc = AttendanceService(attendance_repo)

    first = svc.check_in(7, now=_at(9, 0))
    assert first.ok and first.created
    assert first.value.has_open_session

    out = svc.check_out(7, now=_at(9, 30))
    assert out.ok
    assert out.value.sessions[0].session_minutes == 30
    assert out.value.total_minutes == 30
    assert out.value.entry_exit_total_minutes == 30

    again = svc.check_in(7, now=_at(13, 0))
    assert again.ok and not again.created
    assert len(again.value.sessions) == 2

    last = svc.check_out(7, now=_at(13, 15))
    assert last.ok
    assert [s.session_minutes for s in last.value.sessions] == [30, 15]
    assert last.value.total_minutes == 45
    assert last.value.entry_exit_total_minutes == 255


def test_second_check_in_with_open_session_conflicts_and_leaves_log_alone(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=_at(9, 0))
    before = attendance_repo.get_for_user_and_date(7, date(2025, 1, 6))
    writes = attendance_repo.writes

    res = svc.check_in(7, now=_at(9, 5))

    assert not res.ok
    assert res.error == ErrorKind.CONFLICT
    assert res.message == "Already checked in."
    assert attendance_repo.get_for_user_and_date(7, date(2025, 1, 6)) == before
    assert attendance_repo.writes == writes


def test_check_out_without_log_is_rejected(attendance_repo):
    svc = AttendanceService(attendance_repo)

    res = svc.check_out(7, now=_at(17, 0))

    assert res.error == ErrorKind.PRECONDITION_FAILED
    assert res.message == "Cannot checkout before check-in."
    assert attendance_repo.count_for_user(7) == 0


def test_check_out_twice_is_rejected(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=_at(9, 0))
    svc.check_out(7, now=_at(10, 0))

    res = svc.check_out(7, now=_at(10, 5))

    assert res.error == ErrorKind.PRECONDITION_FAILED
    assert res.message == "Already checked out."
    assert attendance_repo.get_for_user_and_date(7, date(2025, 1, 6)).total_minutes == 60


def test_partial_minutes_are_truncated(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=datetime(2025, 1, 6, 9, 0, 0))

    res = svc.check_out(7, now=datetime(2025, 1, 6, 9, 10, 59))

    assert res.value.total_minutes == 10


def test_logs_are_per_calendar_day(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=_at(9, 0))
    svc.check_out(7, now=_at(10, 0))

    next_day = svc.check_in(7, now=_at(9, 0) + timedelta(days=1))

    assert next_day.created
    assert next_day.value.log_date == date(2025, 1, 7)
    assert attendance_repo.count_for_user(7) == 2


def test_users_do_not_share_logs(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=_at(9, 0))

    other = svc.check_in(8, now=_at(9, 1))

    assert other.ok and other.created


def test_overlong_session_is_rejected_without_mutation(attendance_repo):
    svc = AttendanceService(attendance_repo, max_session_minutes=60)
    svc.check_in(7, now=_at(9, 0))
    writes = attendance_repo.writes

    res = svc.check_out(7, now=_at(10, 1))

    assert res.error == ErrorKind.PRECONDITION_FAILED
    assert attendance_repo.writes == writes
    assert attendance_repo.get_for_user_and_date(7, date(2025, 1, 6)).has_open_session


def test_check_out_loses_to_concurrent_writer(attendance_repo):
    svc = AttendanceService(attendance_repo)
    svc.check_in(7, now=_at(9, 0))

    stale = attendance_repo.get_for_user_and_date
    snapshot = stale(7, date(2025, 1, 6))
    # Someone else closes the session between our read and our write.
    attendance_repo.update_sessions(
        log_id=snapshot.log_id,
        expected_version=snapshot.version,
        sessions=(Session(check_in=_at(9, 0), check_out=_at(9, 20), session_minutes=20),),
        total_minutes=20,
        entry_exit_total_minutes=20,
    )
    attendance_repo.get_for_user_and_date = lambda user_id, log_date: snapshot

    res = svc.check_out(7, now=_at(9, 30))

    assert res.error == ErrorKind.CONFLICT
    assert stale(7, date(2025, 1, 6)).total_minutes == 20


def test_check_in_race_on_create_falls_back_to_existing_log(attendance_repo):
    existing = AttendanceLog(
        log_id=1,
        user_id=7,
        log_date=date(2025, 1, 6),
        sessions=(Session(check_in=_at(8, 59)),),
    )

    class Racing:
        def get_for_user_and_date(self, user_id, log_date):
            return self.seen

        def create_log(self, **kwargs):
            self.seen = existing
            raise DuplicateKeyError("uq_attendance_user_date")

    repo = Racing()
    repo.seen = None

    res = AttendanceService(repo).check_in(7, now=_at(9, 0))

    assert res.error == ErrorKind.CONFLICT
    assert res.message == "Already checked in."


def test_at_most_one_open_session_and_totals_add_up(attendance_repo):
    svc = AttendanceService(attendance_repo)
    t = _at(8, 0)
    for i in range(5):
        svc.check_in(7, now=t)
        svc.check_in(7, now=t + timedelta(minutes=1))
        t += timedelta(minutes=10 + i)
        svc.check_out(7, now=t)
        svc.check_out(7, now=t + timedelta(minutes=1))
        t += timedelta(minutes=5)

    log = attendance_repo.get_for_user_and_date(7, date(2025, 1, 6))
    assert sum(1 for s in log.sessions if s.is_open) == 0
    assert len(log.sessions) == 5
    assert log.total_minutes == sum(s.session_minutes for s in log.sessions)
    assert log.total_minutes <= log.entry_exit_total_minutes


def test_get_today(attendance_repo):
    svc = AttendanceService(attendance_repo)
    assert svc.get_today(7, now=_at(9, 0)).error == ErrorKind.NOT_FOUND

    svc.check_in(7, now=_at(9, 0))

    res = svc.get_today(7, now=_at(12, 0))
    assert res.ok
    assert res.value.to_dict()["sessions"][0]["checkOut"] is None
