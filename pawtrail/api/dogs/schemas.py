# pawtrail/api/dogs/schemas.py
from datetime import timezone
from marshmallow import Schema, fields, validate, EXCLUDE

class DogCreateSchema(Schema):
    """POST /api/dogs 반려견 프로필 생성 요청 스키마."""
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(validate=validate.Length(min=1, max=30), load_default="Buddy")
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50), load_default="Golden Retriever")
    photo_url = fields.Str(allow_none=True, validate=validate.Length(max=500))
    birth_date = fields.AwareDateTime(default_timezone=timezone.utc, allow_none=True)
    weight = fields.Int(allow_none=True, validate=validate.Range(min=0, max=400))
    is_active = fields.Bool(load_default=True)

class DogUpdateSchema(Schema):
    """PUT /api/dogs/<dog_id> 정보 수정을 위한 스키마 (부분 업데이트용)."""
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(validate=validate.Length(min=1, max=30))
    breed = fields.Str(allow_none=True, validate=validate.Length(max=50))
    photo_url = fields.Str(allow_none=True, validate=validate.Length(max=500))
    birth_date = fields.AwareDateTime(default_timezone=timezone.utc, allow_none=True)
    weight = fields.Int(allow_none=True, validate=validate.Range(min=0, max=400))
    is_active = fields.Bool()

class DogProfileResponseSchema(Schema):
    dog_id = fields.Str(dump_only=True)
    user_id = fields.Str(dump_only=True)
    name = fields.Str()
    breed = fields.Str(allow_none=True)
    photo_url = fields.Str(allow_none=True)
    birth_date = fields.DateTime(allow_none=True)
    weight = fields.Int(allow_none=True)
    is_active = fields.Bool()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
