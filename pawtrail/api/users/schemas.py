# pawtrail/api/users/schemas.py
from marshmallow import Schema, fields, validate

class UserCreateSchema(Schema):
    """POST /api/users 요청 스키마."""
    username = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    display_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=50))

class UserResponseSchema(Schema):
    user_id = fields.Str(dump_only=True)
    display_name = fields.Str()
    created_at = fields.DateTime()
