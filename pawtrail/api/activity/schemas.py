# pawtrail/api/activity/schemas.py
from marshmallow import Schema, fields, validate, ValidationError, post_load, post_dump, EXCLUDE

from pawtrail.api.feedings.schemas import FeedingResponseSchema
from pawtrail.api.walks.schemas import WalkResponseSchema, WalkEventResponseSchema
from pawtrail.models.activity import ActivityType
from pawtrail.utils.datetime_utils import DateTimeUtils

class RecentActivityQuerySchema(Schema):
    """GET /api/activity 쿼리 파라미터 검증 스키마. 상한은 설정값으로 route 에서 다시 제한합니다."""
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(validate=validate.Range(min=1))

class DateRangeQuerySchema(Schema):
    """
    GET /api/activity/range 쿼리 파라미터 검증 스키마.
    날짜만 주어진 end_date 는 그 날의 마지막 순간(23:59:59.999999)으로 해석합니다.
    """
    class Meta:
        unknown = EXCLUDE

    start_date = fields.Str(required=True)
    end_date = fields.Str(required=True)

    @staticmethod
    def _is_date_only(value: str) -> bool:
        return len(value) == 10 and value[4] == '-' and value[7] == '-'

    @post_load
    def to_datetimes(self, data, **kwargs):
        try:
            start = DateTimeUtils.parse_iso_datetime(data['start_date'])
            end = DateTimeUtils.parse_iso_datetime(data['end_date'])
        except ValueError as e:
            raise ValidationError(str(e))
        if self._is_date_only(data['end_date']):
            _, end = DateTimeUtils.day_bounds(end)
        if start > end:
            raise ValidationError("'start_date'는 'end_date'보다 늦을 수 없습니다.")
        return {'start': start, 'end': end}

class ActivityItemSchema(Schema):
    """
    활동 피드 항목 응답 스키마.
    type 판별자에 따라 data 를 산책 또는 급식 스키마로 직렬화하고, events 는 산책에만 포함합니다.
    """
    id = fields.Str()
    type = fields.Enum(ActivityType, by_value=True)
    timestamp = fields.DateTime()
    user = fields.Dict()
    data = fields.Method('dump_data')
    events = fields.Method('dump_events')

    def dump_data(self, item):
        if item.type is ActivityType.WALK:
            return WalkResponseSchema(exclude=('events',)).dump(item.data)
        elif item.type is ActivityType.FEEDING:
            return FeedingResponseSchema().dump(item.data)
        raise ValueError(f"알 수 없는 활동 타입입니다: {item.type}")

    def dump_events(self, item):
        if item.type is ActivityType.WALK:
            return WalkEventResponseSchema(many=True).dump(item.events)
        elif item.type is ActivityType.FEEDING:
            return None
        raise ValueError(f"알 수 없는 활동 타입입니다: {item.type}")

    @post_dump(pass_original=True)
    def drop_feeding_events(self, data, item, **kwargs):
        if item.type is ActivityType.FEEDING:
            data.pop('events', None)
        return data
