# waste_admin/api/auth/routes.py

import logging
from datetime import datetime, timezone
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    jwt_required,
    get_jwt_identity,
    get_jwt,
)
from marshmallow import ValidationError

from waste_admin.core.security import admin_required, create_admin_tokens
from waste_admin.api.users.schemas import UserProfileSchema
from .schemas import SignInSchema, SignUpSchema, LogoutRequestSchema, SessionSchema, SignInResponseSchema

auth_bp = Blueprint('auth_bp', __name__)

@auth_bp.route('/signin', methods=['POST'])
def sign_in():
    """관리자 로그인. 허용 목록에 없는 계정은 즉시 로그아웃되고 403을 반환합니다."""
    auth_service = current_app.services['auth']
    try:
        data = SignInSchema().load(request.get_json() or {})
    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400

    session = auth_service.sign_in(data['email'], data['password'])
    tokens = create_admin_tokens(session)
    return jsonify(SignInResponseSchema().dump({**tokens, "session": session})), 200


@auth_bp.route('/signup', methods=['POST'])
def sign_up():
    """계정 생성 + user_id 프로필 문서 생성"""
    auth_service = current_app.services['auth']
    try:
        data = SignUpSchema().load(request.get_json() or {})
    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400

    profile = auth_service.sign_up(data['email'], data['password'], data['display_name'])
    return jsonify(UserProfileSchema().dump(profile)), 201


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True) # Refresh Token만 허용하는 데코레이터
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    claims = get_jwt()
    new_access_token = create_access_token(
        identity=get_jwt_identity(),
        additional_claims={"email": claims.get("email"), "is_admin": claims.get("is_admin", False)}
    )
    return jsonify(access_token=new_access_token), 200


# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 인증 제공자 세션을 무효화하고 전달받은 Access/Refresh 토큰을 Blocklist에 추가합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # 만료된 토큰으로도 로그아웃할 수 있도록 'verify_exp=False' 옵션을 사용합니다.
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT 해독 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422

    uid = decoded_access.get('sub')
    revoked = [
        (decoded['jti'], datetime.fromtimestamp(decoded['exp'], tz=timezone.utc))
        for decoded in (decoded_access, decoded_refresh)
    ]
    error = auth_service.sign_out(uid, revoked)
    current_app.services['waste_log_viewers'].discard(uid)

    if error:
        # 로그아웃 실패는 호출자에게 알리되 치명적인 오류로 취급하지 않습니다.
        return jsonify({"message": "로그아웃 되었습니다.", "warning": error}), 200
    return jsonify({"message": "로그아웃 되었습니다."}), 200


@auth_bp.route('/session', methods=['GET'])
def current_session():
    """현재 세션 정보. 로그인하지 않았으면 session은 null입니다."""
    session = current_app.services['auth'].get_current_session()
    return jsonify({"session": SessionSchema().dump(session) if session else None}), 200


@auth_bp.route('/admins/<string:email>', methods=['GET'])
@admin_required
def check_admin(email: str):
    is_admin = current_app.services['auth'].check_admin_by_email(email)
    return jsonify({"email": email, "is_admin": is_admin}), 200
