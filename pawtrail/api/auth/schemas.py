# pawtrail/api/auth/schemas.py
from marshmallow import Schema, fields, validate

class LoginSchema(Schema):
    """사용자명 로그인 요청 스키마."""
    username = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    display_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=50))

class AuthUserResponseSchema(Schema):
    """GET /api/auth/user 응답 스키마."""
    user_id = fields.Str(dump_only=True)
    username = fields.Function(lambda user: user.user_id, dump_only=True)
    display_name = fields.Str()
