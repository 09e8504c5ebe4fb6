# pawtrail/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. 모든 시간 관련 작업을 UTC 기준으로 표준화
2. Firestore 저장/조회 시 datetime 호환성 보장
3. 산책 시간(분) 계산 방식 통일
"""

import logging
from datetime import datetime, date, timezone, time, timedelta
from typing import Any, Tuple, Union
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00 (UTC로 간주)
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 'Z' 접미사가 붙은 UTC ISO 문자열로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """timezone-naive datetime은 UTC로 간주하고, aware datetime은 UTC로 변환"""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.ensure_utc(obj)
        elif isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC datetime으로 정규화

        Firestore의 DatetimeWithNanoseconds 도 datetime의 하위 클래스이므로
        일반 datetime 으로 다시 만들어 비교/직렬화 동작을 통일합니다.
        """
        if isinstance(obj, datetime):
            dt = DateTimeUtils.ensure_utc(obj)
            return datetime(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
                            dt.microsecond, tzinfo=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        API 요청에서 받은 datetime 값을 검증하고 UTC datetime으로 변환

        Raises:
            ValueError: 잘못된 형식이거나 파싱할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        if isinstance(value, datetime):
            return DateTimeUtils.ensure_utc(value)
        raise ValueError(f"{field_name}은 문자열 또는 datetime 객체여야 합니다")

    @staticmethod
    def elapsed_minutes(start: datetime, end: datetime) -> int:
        """
        두 시각 사이의 경과 시간을 분 단위로 내림하여 반환합니다.
        end가 start보다 앞서면 0을 반환합니다.
        """
        delta = DateTimeUtils.ensure_utc(end) - DateTimeUtils.ensure_utc(start)
        seconds = int(delta.total_seconds())
        return max(0, seconds // 60)

    @staticmethod
    def day_bounds(d: Union[date, datetime]) -> Tuple[datetime, datetime]:
        """특정 날짜의 시작(00:00:00)과 끝(23:59:59.999999) 시각을 UTC로 반환"""
        if isinstance(d, datetime):
            d = DateTimeUtils.ensure_utc(d).date()
        start = datetime.combine(d, time.min).replace(tzinfo=timezone.utc)
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        return start, end

