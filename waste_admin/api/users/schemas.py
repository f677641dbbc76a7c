# waste_admin/api/users/schemas.py
from marshmallow import Schema, fields

class UserProfileSchema(Schema):
    """
    GET /api/users/{user_id}
    user_id 컬렉션의 프로필 문서를 응답할 때 사용하는 스키마.
    """
    firebase_uid = fields.Str(required=True, dump_only=True)
    email = fields.Str()
    name = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    user_point = fields.Int()
    department_id = fields.Str()
