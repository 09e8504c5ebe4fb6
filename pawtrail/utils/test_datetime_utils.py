# pawtrail/utils/test_datetime_utils.py
"""
시간 유틸리티 기능 테스트

사용법: python -m pytest pawtrail/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from pawtrail.utils.datetime_utils import DateTimeUtils

def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

    kst = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00")
    assert kst == datetime(2024, 1, 15, 1, 30, tzinfo=timezone.utc)

def test_parse_iso_datetime_invalid():
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("not-a-date")
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")

def test_to_iso_string():
    dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T10:30:00Z"
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00Z"

def test_for_firestore():
    """Firestore 변환 테스트"""
    test_data = {
        'birth_date': date(2020, 1, 15),
        'timestamp': datetime(2024, 1, 15, 10, 30),
        'nested': {'event_date': date(2023, 12, 25)},
        'list_data': [{'created_at': datetime(2024, 1, 1)}],
        'name': 'Buddy',
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert isinstance(converted['birth_date'], datetime)
    assert converted['timestamp'].tzinfo == timezone.utc
    assert isinstance(converted['nested']['event_date'], datetime)
    assert converted['list_data'][0]['created_at'].tzinfo == timezone.utc
    assert converted['name'] == 'Buddy'

def test_from_firestore_normalizes_to_utc():
    kst = timezone(timedelta(hours=9))
    data = {'timestamp': datetime(2024, 1, 15, 19, 30, tzinfo=kst), 'count': 3}
    processed = DateTimeUtils.from_firestore(data)
    assert processed['timestamp'] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert processed['timestamp'].tzinfo == timezone.utc
    assert processed['count'] == 3

def test_validate_datetime_field():
    assert DateTimeUtils.validate_datetime_field("2024-01-15T10:30:00Z").tzinfo == timezone.utc
    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(None, "timestamp")
    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(12345, "timestamp")

def test_elapsed_minutes_floors_and_clamps():
    start = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert DateTimeUtils.elapsed_minutes(start, start + timedelta(minutes=30, seconds=59)) == 30
    assert DateTimeUtils.elapsed_minutes(start, start + timedelta(seconds=59)) == 0
    # 종료가 시작보다 앞서면 0
    assert DateTimeUtils.elapsed_minutes(start, start - timedelta(minutes=5)) == 0

def test_day_bounds():
    start, end = DateTimeUtils.day_bounds(date(2024, 12, 24))
    assert start == datetime(2024, 12, 24, 0, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 12, 24, 23, 59, 59, 999999, tzinfo=timezone.utc)

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
