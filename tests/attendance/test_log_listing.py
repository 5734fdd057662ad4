from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.timexa.timexa.attendance.model import AttendanceLog, Session
from src.timexa.timexa.attendance.service import AttendanceService
from src.timexa.timexa.core.result import ErrorKind


def _seed(repo, user_id: int, days: int, *, start: date = date(2025, 1, 1)):
    for i in range(days):
        d = start + timedelta(days=i)
        check_in = datetime(d.year, d.month, d.day, 9, 0)
        minutes = 60 + (i * 37) % 300
        repo.seed(
            AttendanceLog(
                log_id=user_id * 1000 + i + 1,
                user_id=user_id,
                log_date=d,
                sessions=(Session(check_in, check_in + timedelta(minutes=minutes), minutes),),
                total_minutes=minutes,
                entry_exit_total_minutes=minutes,
            )
        )


def test_defaults_are_first_page_of_ten_newest_first(attendance_repo):
    _seed(attendance_repo, 7, 25)
    svc = AttendanceService(attendance_repo)

    res = svc.list_logs(7)

    assert res.ok
    meta = res.value.meta
    assert (meta.current_page, meta.page_size, meta.total_pages, meta.total_records) == (1, 10, 3, 25)
    assert meta.has_next_page and not meta.has_previous_page
    dates = [log.log_date for log in res.value.items]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == date(2025, 1, 25)


def test_last_page_is_partial(attendance_repo):
    _seed(attendance_repo, 7, 25)

    res = AttendanceService(attendance_repo).list_logs(7, page="3", page_size="10")

    assert len(res.value.items) == 5
    assert not res.value.meta.has_next_page
    assert res.value.meta.has_previous_page


def test_page_past_the_end_is_empty(attendance_repo):
    _seed(attendance_repo, 7, 3)

    res = AttendanceService(attendance_repo).list_logs(7, page=9)

    assert res.ok
    assert res.value.items == []
    assert res.value.meta.total_pages == 1


def test_no_logs_means_zero_pages(attendance_repo):
    res = AttendanceService(attendance_repo).list_logs(7)

    assert res.ok
    assert res.value.meta.total_pages == 0
    assert not res.value.meta.has_next_page


@pytest.mark.parametrize(
    "page,limit,expected",
    [
        (0, 10, (1, 10)),
        (-4, 10, (1, 10)),
        (1, 0, (1, 1)),
        (1, 500, (1, 100)),
    ],
)
def test_out_of_range_numbers_are_clamped(attendance_repo, page, limit, expected):
    _seed(attendance_repo, 7, 2)

    meta = AttendanceService(attendance_repo).list_logs(7, page=page, page_size=limit).value.meta

    assert (meta.current_page, meta.page_size) == expected


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page": "abc"},
        {"page_size": "ten"},
        {"sort_field": "userId"},
        {"sort_direction": "sideways"},
    ],
)
def test_malformed_query_is_invalid_input(attendance_repo, kwargs):
    res = AttendanceService(attendance_repo).list_logs(7, **kwargs)

    assert res.error == ErrorKind.INVALID_INPUT


def test_sort_by_total_minutes_ascending(attendance_repo):
    _seed(attendance_repo, 7, 12)

    res = AttendanceService(attendance_repo).list_logs(7, page_size=50, sort_field="totalMinutes", sort_direction="asc")

    totals = [log.total_minutes for log in res.value.items]
    assert totals == sorted(totals)


def test_pages_cover_every_log_exactly_once(attendance_repo):
    _seed(attendance_repo, 7, 23)
    _seed(attendance_repo, 8, 4)
    svc = AttendanceService(attendance_repo)

    seen = []
    page = 1
    while True:
        res = svc.list_logs(7, page=page, page_size=4, sort_direction="asc")
        seen.extend(log.log_id for log in res.value.items)
        if not res.value.meta.has_next_page:
            break
        page += 1

    assert len(seen) == len(set(seen)) == 23
    assert page == res.value.meta.total_pages == 6
