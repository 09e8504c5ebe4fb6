# pawtrail/api/walks/schemas.py
from datetime import timezone
from marshmallow import Schema, fields, validate, EXCLUDE

from pawtrail.models.walk import WalkEventType

class WalkStartSchema(Schema):
    """POST /api/walks 요청 스키마. start_time 을 생략하면 현재 시각으로 시작합니다."""
    class Meta:
        unknown = EXCLUDE

    start_time = fields.AwareDateTime(default_timezone=timezone.utc, allow_none=True)

class WalkUpdateSchema(Schema):
    """
    PUT /api/walks/<walk_id> 요청 스키마 (부분 업데이트).
    is_completed=True 가 포함되면 완료 처리로 해석합니다. 완료된 산책을 되돌릴 수는 없습니다.
    """
    class Meta:
        unknown = EXCLUDE

    start_time = fields.AwareDateTime(default_timezone=timezone.utc)
    end_time = fields.AwareDateTime(default_timezone=timezone.utc)
    duration = fields.Int(strict=True, validate=validate.Range(min=0))
    is_completed = fields.Bool(validate=validate.Equal(True, error="완료된 산책을 진행 중으로 되돌릴 수 없습니다."))

class WalkEventCreateSchema(Schema):
    """POST /api/walks/<walk_id>/events 요청 스키마."""
    class Meta:
        unknown = EXCLUDE

    event_type = fields.Str(required=True, validate=validate.OneOf([e.value for e in WalkEventType]))
    timestamp = fields.AwareDateTime(default_timezone=timezone.utc, allow_none=True)

class WalkListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(validate=validate.Range(min=1, max=100), load_default=10)

class WalkEventResponseSchema(Schema):
    event_id = fields.Str(dump_only=True)
    walk_id = fields.Str(dump_only=True)
    event_type = fields.Enum(WalkEventType, by_value=True)
    timestamp = fields.DateTime()
    created_at = fields.DateTime()

class WalkResponseSchema(Schema):
    """산책 응답 스키마 (이벤트 목록 포함)."""
    walk_id = fields.Str(dump_only=True)
    user_id = fields.Str(dump_only=True)
    start_time = fields.DateTime()
    end_time = fields.DateTime(allow_none=True)
    duration = fields.Int(allow_none=True)
    is_completed = fields.Bool()
    created_at = fields.DateTime()
    events = fields.List(fields.Nested(WalkEventResponseSchema))
