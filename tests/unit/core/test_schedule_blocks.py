# SPDX-License-Identifier: Apache-2.0
"""
Unit tests for weekly schedule conversion.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from core.calendar.models import ScheduleBlock
from core.calendar.schedule import build_schedule_blocks


UTC = timezone.utc
SUNDAY = date(2024, 1, 7)


def test_days_are_placed_relative_to_week_start():
    schedule = {
        'Sunday': [{'task': 'Review', 'startTime': '18:00', 'endTime': '19:00'}],
        'Saturday': [{'task': 'Practice exam', 'startTime': '10:00', 'endTime': '12:00'}],
        'Tuesday': [{'task': 'Reading', 'startTime': '08:30', 'endTime': '09:15'}],
    }

    blocks = build_schedule_blocks(schedule, SUNDAY, UTC)

    assert [(b.title, b.start, b.end) for b in blocks] == [
        ('Review', datetime(2024, 1, 7, 18, tzinfo=UTC), datetime(2024, 1, 7, 19, tzinfo=UTC)),
        ('Reading', datetime(2024, 1, 9, 8, 30, tzinfo=UTC), datetime(2024, 1, 9, 9, 15, tzinfo=UTC)),
        ('Practice exam', datetime(2024, 1, 13, 10, tzinfo=UTC), datetime(2024, 1, 13, 12, tzinfo=UTC)),
    ]


def test_monday_week_start():
    schedule = {'sunday': [{'task': 'Review', 'startTime': '18:00', 'endTime': '19:00'}]}

    (block,) = build_schedule_blocks(schedule, date(2024, 1, 8), UTC)

    assert block.start == datetime(2024, 1, 14, 18, tzinfo=UTC)


def test_system_local_zone_follows_dst_change(new_york_local_time):
    # DST begins Sunday 2024-03-10 in New York
    schedule = {
        'Saturday': [{'task': 'Before', 'startTime': '09:00', 'endTime': '10:00'}],
        'Monday': [{'task': 'After', 'startTime': '09:00', 'endTime': '10:00'}],
    }

    blocks = build_schedule_blocks(schedule, date(2024, 3, 9))

    assert [b.to_canonical().start_time for b in blocks] == [
        '2024-03-09T14:00:00Z',
        '2024-03-11T13:00:00Z',
    ]


def test_aware_week_start_is_converted_to_local_day():
    berlin = ZoneInfo('Europe/Berlin')
    # Sunday 23:30 UTC is already Monday in Berlin
    week_start = datetime(2024, 1, 7, 23, 30, tzinfo=UTC)
    schedule = {'Monday': [{'task': 'Math', 'startTime': '09:00', 'endTime': '10:00'}]}

    (block,) = build_schedule_blocks(schedule, week_start, berlin)

    assert block.start == datetime(2024, 1, 8, 9, tzinfo=berlin)


def test_list_schedule_with_day_keys():
    schedule = [
        {'day': 'Wednesday', 'title': 'Lab prep', 'startTime': '13:00', 'endTime': '14:00'},
        {'day': 'Monday', 'task': 'Math', 'startTime': '9:00', 'endTime': '10:00'},
    ]

    blocks = build_schedule_blocks(schedule, SUNDAY, UTC)

    assert [b.title for b in blocks] == ['Math', 'Lab prep']
    assert blocks[0].start == datetime(2024, 1, 8, 9, tzinfo=UTC)


def test_end_before_start_rolls_over_midnight():
    schedule = {'Friday': [{'task': 'Night owl', 'startTime': '23:00', 'endTime': '01:00'}]}

    (block,) = build_schedule_blocks(schedule, SUNDAY, UTC)

    assert block.start == datetime(2024, 1, 12, 23, tzinfo=UTC)
    assert block.end == datetime(2024, 1, 13, 1, tzinfo=UTC)


def test_malformed_items_are_skipped(caplog):
    schedule = {
        'Funday': [{'task': 'Unknown day', 'startTime': '09:00', 'endTime': '10:00'}],
        'Monday': [
            {'task': 'No end', 'startTime': '09:00'},
            {'task': 'Bad hour', 'startTime': '25:00', 'endTime': '26:00'},
            {'task': 'Words', 'startTime': 'morning', 'endTime': 'noon'},
            'not an item',
            {'task': 'Valid', 'startTime': '11:00', 'endTime': '12:00'},
        ],
        'Tuesday': 'not a list',
    }

    with caplog.at_level('WARNING', logger='studyplanner.calendar.schedule'):
        blocks = build_schedule_blocks(schedule, SUNDAY, UTC)

    assert [b.title for b in blocks] == ['Valid']
    assert 'unknown day: Funday' in caplog.text


def test_blank_task_gets_default_title():
    schedule = {'Monday': [{'task': '  ', 'startTime': '09:00', 'endTime': '10:00'}]}

    (block,) = build_schedule_blocks(schedule, SUNDAY, UTC)

    assert block.title == 'Study Session'


def test_due_dates_are_attached():
    schedule = {'Monday': [
        {'task': 'Essay', 'startTime': '09:00', 'endTime': '10:00'},
        {'task': 'Math', 'startTime': '11:00', 'endTime': '12:00'},
    ]}
    tasks = [
        {'title': 'Essay', 'dueDate': '2024-01-12'},
        {'title': 'Math'},
        'ignored',
    ]

    blocks = build_schedule_blocks(schedule, SUNDAY, UTC, tasks)

    assert [b.description for b in blocks] == ['Due: 2024-01-12', None]


def test_not_a_schedule():
    assert build_schedule_blocks(None, SUNDAY, UTC) == []
    assert build_schedule_blocks('Monday 9-10', SUNDAY, UTC) == []


class TestScheduleBlock:
    """Provider body conversion."""

    def test_google_body_with_named_zone(self):
        berlin = ZoneInfo('Europe/Berlin')
        block = ScheduleBlock(
            title='Math',
            start=datetime(2024, 1, 8, 9, tzinfo=berlin),
            end=datetime(2024, 1, 8, 10, tzinfo=berlin),
            description='Due: 2024-01-12',
        )

        assert block.to_google_body() == {
            'summary': 'Math',
            'start': {'dateTime': '2024-01-08T09:00:00+01:00', 'timeZone': 'Europe/Berlin'},
            'end': {'dateTime': '2024-01-08T10:00:00+01:00', 'timeZone': 'Europe/Berlin'},
            'extendedProperties': {'private': {'managed_by': 'studyplanner'}},
            'description': 'Due: 2024-01-12',
        }

    def test_google_body_with_fixed_offset(self):
        block = ScheduleBlock(
            title='Math',
            start=datetime(2024, 1, 8, 9, tzinfo=UTC),
            end=datetime(2024, 1, 8, 10, tzinfo=UTC),
        )

        body = block.to_google_body()

        assert body['start'] == {'dateTime': '2024-01-08T09:00:00+00:00'}
        assert 'description' not in body

    def test_to_canonical(self):
        berlin = ZoneInfo('Europe/Berlin')
        block = ScheduleBlock(
            title='Math',
            start=datetime(2024, 1, 8, 9, tzinfo=berlin),
            end=datetime(2024, 1, 8, 10, tzinfo=berlin),
        )

        event = block.to_canonical()

        assert (event.start_time, event.end_time) == ('2024-01-08T08:00:00Z', '2024-01-08T09:00:00Z')
