#waste_admin/api/auth/schemas.py
from marshmallow import Schema, fields, validate

class SignInSchema(Schema):
    """관리자 로그인 요청의 유효성을 검사하는 스키마"""
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=1), load_only=True)

class SignUpSchema(Schema):
    """회원가입 요청의 유효성을 검사하는 스키마"""
    email = fields.Email(required=True)
    # Firebase Authentication은 6자 미만 비밀번호를 거부합니다.
    password = fields.Str(required=True, validate=validate.Length(min=6), load_only=True)
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=100))

class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)

class SessionSchema(Schema):
    uid = fields.Str()
    email = fields.Str(allow_none=True)
    display_name = fields.Str(allow_none=True)
    is_admin = fields.Bool(dump_default=True)

class SignInResponseSchema(Schema):
    access_token = fields.Str()
    refresh_token = fields.Str()
    session = fields.Nested(SessionSchema)
