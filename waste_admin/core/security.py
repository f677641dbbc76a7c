from functools import wraps
from typing import Dict

from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    verify_jwt_in_request,
    get_jwt,
)

from waste_admin.core.errors import AuthorizationError
from waste_admin.models.user import AdminSession


def create_admin_tokens(session: AdminSession) -> Dict[str, str]:
    """관리자 세션에 대한 Access/Refresh 토큰을 발급합니다."""
    claims = {"email": session.email, "is_admin": True}
    return {
        "access_token": create_access_token(identity=session.uid, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=session.uid, additional_claims=claims),
    }


def admin_required(f):
    """유효한 Access 토큰과 관리자 클레임을 요구하는 데코레이터"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        if not get_jwt().get("is_admin"):
            raise AuthorizationError("관리자만 접근할 수 있습니다.")
        return f(*args, **kwargs)

    return decorated_function
