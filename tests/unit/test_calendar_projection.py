from datetime import date
from types import SimpleNamespace

from app.schemas.calendar import CalendarMode, CalendarShift
from app.services.calendar_service import build_session_calendar_ics, shift_anchor, window_bounds


def test_week_window_starts_on_preceding_sunday():
    assert window_bounds(date(2024, 1, 3), CalendarMode.WEEK) == (date(2023, 12, 31), 7)
    assert window_bounds(date(2024, 1, 7), CalendarMode.WEEK) == (date(2024, 1, 7), 7)


def test_month_window_covers_the_whole_month():
    assert window_bounds(date(2024, 2, 17), CalendarMode.MONTH) == (date(2024, 2, 1), 29)
    assert window_bounds(date(2023, 4, 30), CalendarMode.MONTH) == (date(2023, 4, 1), 30)


def test_shift_moves_by_one_window():
    today = date(2024, 1, 1)

    assert shift_anchor(date(2024, 1, 3), CalendarMode.WEEK, CalendarShift.NEXT, today) == date(2024, 1, 10)
    assert shift_anchor(date(2024, 1, 3), CalendarMode.WEEK, CalendarShift.PREVIOUS, today) == date(2023, 12, 27)
    assert shift_anchor(date(2024, 1, 31), CalendarMode.MONTH, CalendarShift.NEXT, today) == date(2024, 2, 29)
    assert shift_anchor(date(2024, 3, 15), CalendarMode.MONTH, CalendarShift.PREVIOUS, today) == date(2024, 2, 15)
    assert shift_anchor(date(2030, 6, 1), CalendarMode.MONTH, CalendarShift.TODAY, today) == today


def test_session_calendar_file_uses_floating_wall_clock_times():
    session = SimpleNamespace(
        id=42,
        date=date(2024, 1, 2),
        start_time="10:00",
        end_time="11:00",
        category="Strength",
        client_name="Jordan, Lee",
        location="Studio A",
        status="pending",
    )

    content = build_session_calendar_ics(session, trainer_display_name="Sam")

    assert "DTSTART:20240102T100000\r\n" in content
    assert "DTEND:20240102T110000\r\n" in content
    assert "SUMMARY:Strength with Sam" in content
    assert r"Client: Jordan\, Lee" in content
    assert "STATUS:TENTATIVE" in content
    assert content.startswith("BEGIN:VCALENDAR\r\n")
