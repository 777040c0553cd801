from __future__ import annotations

from datetime import date

from availability import parse_availability, parse_date_token, parse_preference, split_tokens
from run_log import RunLog
from tests.utils import TODAY


def test_bad_token_is_skipped_not_fatal() -> None:
    log = RunLog()
    dates = parse_availability("3/1, 3/8, not-a-date, 3/15", TODAY, log, "Ann")

    assert dates == {date(2026, 3, 1), date(2026, 3, 8), date(2026, 3, 15)}
    assert len(log.rows) == 1
    assert log.rows[0]["Subject"] == "Ann"
    assert log.rows[0]["Value"] == "not-a-date"
    assert log.rows[0]["Status"] == "Unparseable date"


def test_form_checkbox_answers_with_weekday_and_year() -> None:
    log = RunLog()
    raw = "Sunday, March 1, 2026; Sunday, March 8, 2026"
    assert parse_availability(raw, TODAY, log) == {date(2026, 3, 1), date(2026, 3, 8)}
    assert log.rows == []


def test_empty_and_garbage_inputs() -> None:
    log = RunLog()
    assert parse_availability("", TODAY, log) == set()
    assert parse_availability(None, TODAY, log) == set()
    assert log.rows == []

    assert parse_availability("whenever works", TODAY, log, "Bo") == set()
    assert [r["Value"] for r in log.rows] == ["whenever works"]


def test_token_forms() -> None:
    assert parse_date_token("2026-03-01", TODAY) == date(2026, 3, 1)
    assert parse_date_token("3/1/26", TODAY) == date(2026, 3, 1)
    assert parse_date_token("3/1/2026", TODAY) == date(2026, 3, 1)
    assert parse_date_token("Mar 1", TODAY) == date(2026, 3, 1)
    assert parse_date_token("March 1st", TODAY) == date(2026, 3, 1)
    assert parse_date_token("Sun 3/1", TODAY) == date(2026, 3, 1)
    assert parse_date_token("2/30", TODAY) is None
    assert parse_date_token("8", TODAY) is None
    assert parse_date_token("Sunday", TODAY) is None
    assert parse_date_token("March 2026", TODAY) is None
    assert parse_date_token("Smarch 1", TODAY) is None
    assert parse_date_token("", TODAY) is None


def test_yearless_dates_roll_forward_only_when_well_past() -> None:
    nov = date(2026, 11, 1)
    assert parse_date_token("1/10", nov) == date(2027, 1, 10)
    assert parse_date_token("10/25", nov) == date(2026, 10, 25)


def test_yearless_dates_can_stay_in_current_year() -> None:
    oct18 = date(2026, 10, 18)
    assert parse_date_token("3/1", oct18, roll_forward=False) == date(2026, 3, 1)
    assert parse_date_token("11/1", oct18, roll_forward=False) == date(2026, 11, 1)
    assert parse_date_token("3/1/2027", oct18, roll_forward=False) == date(2027, 3, 1)


def test_trailing_number_is_not_read_as_a_year() -> None:
    log = RunLog()
    assert parse_availability("March 1, 8", TODAY, log) == {date(2026, 3, 1)}
    assert [r["Value"] for r in log.rows] == ["8"]
    assert parse_availability("March 1, 2026", TODAY) == {date(2026, 3, 1)}
    assert parse_availability("Sunday, March 1", TODAY) == {date(2026, 3, 1)}


def test_exact_calendar_day_only() -> None:
    dates = parse_availability("3/1", TODAY)
    assert date(2026, 3, 1) in dates
    assert date(2026, 2, 28) not in dates
    assert len(dates) == 1


def test_split_tokens_handles_mixed_separators() -> None:
    assert split_tokens("3/1,3/8;\n 3/15 ,") == ["3/1", "3/8", "3/15"]


def test_preference() -> None:
    log = RunLog()
    assert parse_preference("3/8/2026", TODAY, log) == date(2026, 3, 8)
    assert parse_preference("3/8/2026 0:00:00", TODAY, log) == date(2026, 3, 8)
    assert parse_preference("", TODAY, log) is None
    assert log.rows == []

    assert parse_preference("any of them", TODAY, log, "Cy") is None
    assert log.rows[0]["Phase"] == "preference"
