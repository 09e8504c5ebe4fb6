# pawtrail/api/feedings/schemas.py
from datetime import timezone
from marshmallow import Schema, fields, validate, EXCLUDE

from pawtrail.models.feeding import MealType, Portion

class FeedingCreateSchema(Schema):
    """POST /api/feedings 요청 스키마."""
    class Meta:
        unknown = EXCLUDE

    meal_type = fields.Str(required=True, validate=validate.OneOf([e.value for e in MealType]))
    portion = fields.Str(required=True, validate=validate.OneOf([e.value for e in Portion]))
    notes = fields.Str(required=False, allow_none=True, validate=validate.Length(max=500))
    timestamp = fields.AwareDateTime(default_timezone=timezone.utc, allow_none=True)

class FeedingUpdateSchema(FeedingCreateSchema):
    """
    PUT /api/feedings/<feeding_id> 요청 스키마.
    선언된 필드 외의 값은 EXCLUDE 로 조용히 버려집니다.
    """
    class Meta:
        unknown = EXCLUDE

    timestamp = fields.AwareDateTime(default_timezone=timezone.utc)

class FeedingListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Int(validate=validate.Range(min=1, max=100), load_default=10)

class FeedingResponseSchema(Schema):
    feeding_id = fields.Str(dump_only=True)
    user_id = fields.Str(dump_only=True)
    meal_type = fields.Enum(MealType, by_value=True)
    portion = fields.Enum(Portion, by_value=True)
    notes = fields.Str(allow_none=True)
    timestamp = fields.DateTime()
    created_at = fields.DateTime()

class LastFeedingResponseSchema(FeedingResponseSchema):
    """가장 최근 급식 기록 응답 (작성자 요약 포함)."""
    user = fields.Dict()
