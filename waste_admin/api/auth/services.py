# waste_admin/api/auth/services.py
import logging
from datetime import datetime
from typing import Dict, Any, Iterable, Optional, Tuple

import jwt
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException

from waste_admin.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    TransientFetchError,
)
from waste_admin.models.user import AdminSession, UserProfile
from waste_admin.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

class AuthService:
    """
    관리자 로그인 게이트.
    자격 증명 확인(IdentityService)과 관리자 허용 목록(admin_id 컬렉션) 확인을 묶어
    '관리자 세션 발급 여부'를 결정합니다.
    """
    def __init__(self, db, identity_service,
                 users_collection: str = 'user_id',
                 admins_collection: str = 'admin_id',
                 revoked_tokens_collection: str = 'revoked_tokens'):
        self.db = db
        self.identity = identity_service
        self.users_ref = db.collection(users_collection)
        self.admins_ref = db.collection(admins_collection)
        self.revoked_tokens_ref = db.collection(revoked_tokens_collection)

    # --- 로그인 / 회원가입 / 로그아웃 ---
    def sign_in(self, email: str, password: str) -> AdminSession:
        """자격 증명 확인 후 관리자 허용 목록에 있는 경우에만 세션을 발급합니다."""
        identity = self.identity.sign_in_with_password(email, password)
        uid = identity["uid"]
        account_email = identity.get("email") or email

        try:
            allowed = self.is_admin(account_email)
        except Exception as e:
            logger.error(f"관리자 확인 중 오류 발생, 세션을 종료합니다 (uid: {uid}): {e}")
            self.sign_out(uid)
            raise AuthenticationError("관리자 권한을 확인할 수 없습니다.", "ADMIN_CHECK_FAILED") from e

        if not allowed:
            logger.warning(f"관리자가 아닌 계정의 로그인 시도 (uid: {uid})")
            self.sign_out(uid)
            raise AuthorizationError("관리자 계정이 아닙니다.")

        logger.info(f"관리자 로그인 성공 (uid: {uid})")
        return AdminSession(
            uid=uid,
            email=account_email,
            display_name=identity.get("display_name"),
            id_token=identity.get("id_token"),
            refresh_token=identity.get("refresh_token"),
        )

    def sign_up(self, email: str, password: str, display_name: str) -> UserProfile:
        """
        계정을 만들고 user_id 컬렉션에 기본 프로필을 생성합니다.
        프로필 저장에 실패하면 방금 만든 계정을 삭제하여 반쯤 만들어진 계정을 남기지 않습니다.
        """
        uid = self.identity.create_user(email, password, display_name)

        now = DateTimeUtils.now()
        profile = UserProfile(firebase_uid=uid, email=email, name=display_name, created_at=now, updated_at=now)
        try:
            self.users_ref.document(uid).set(DateTimeUtils.for_firestore(profile.to_document()))
        except Exception as e:
            logger.error(f"프로필 생성 실패, 계정을 롤백합니다 (uid: {uid}): {e}", exc_info=True)
            try:
                self.identity.delete_user(uid)
            except Exception as rollback_error:
                logger.critical(f"계정 롤백 실패, 수동 정리가 필요합니다 (uid: {uid}): {rollback_error}")
            raise AuthenticationError("계정 프로필을 생성하지 못했습니다.", "PROFILE_PROVISIONING_FAILED") from e

        logger.info(f"회원가입 완료 (uid: {uid})")
        return profile

    def sign_out(self, uid: Optional[str], revoked_tokens: Iterable[Tuple[str, datetime]] = ()) -> Optional[str]:
        """
        세션을 종료합니다. 여러 번 호출해도 안전하며 예외를 던지지 않습니다.

        :param uid: 인증 제공자 쪽 세션(Refresh Token)을 무효화할 사용자
        :param revoked_tokens: Blocklist에 추가할 대시보드 JWT의 (jti, 만료 시각) 목록
        :return: 실패한 단계가 있으면 오류 메시지, 모두 성공하면 None
        """
        errors = []
        if uid:
            try:
                self.identity.revoke_refresh_tokens(uid)
            except Exception as e:
                logger.error(f"세션 무효화 실패 (uid: {uid}): {e}")
                errors.append(str(e))

        for jti, expires in revoked_tokens:
            try:
                self.add_token_to_blocklist(jti, expires)
            except Exception as e:
                logger.error(f"Blocklist 토큰 추가 실패 (jti: {jti[:8]}...): {e}")
                errors.append(str(e))

        return "; ".join(errors) or None

    # --- 세션 / 프로필 조회 ---
    def get_current_session(self) -> Optional[Dict[str, Any]]:
        """
        현재 요청의 Access 토큰에서 세션 정보를 읽습니다.
        토큰이 없거나 만료/무효화/위조된 경우 None을 반환합니다.
        """
        try:
            verify_jwt_in_request(optional=True)
        except (JWTExtendedException, jwt.PyJWTError) as e:
            logger.info(f"유효하지 않은 토큰으로 세션 조회: {type(e).__name__}")
            return None
        uid = get_jwt_identity()
        if not uid:
            return None
        claims = get_jwt()
        return {"uid": uid, "email": claims.get("email"), "is_admin": bool(claims.get("is_admin"))}

    def get_user_profile(self, user_id: str) -> UserProfile:
        try:
            doc = self.users_ref.document(user_id).get()
        except Exception as e:
            logger.error(f"사용자 프로필 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise TransientFetchError("사용자 프로필을 조회하지 못했습니다.") from e

        if not doc.exists:
            raise NotFoundError("사용자를 찾을 수 없습니다.", "USER_NOT_FOUND")
        return UserProfile.from_document(doc.id, doc.to_dict())

    # --- 관리자 확인 ---
    def is_admin(self, email: str) -> bool:
        """admin_id 컬렉션에 email 필드가 일치하는 문서가 있는지 확인합니다."""
        if not email:
            return False
        try:
            docs = self.admins_ref.where('email', '==', email).limit(1).get()
        except Exception as e:
            logger.error(f"관리자 허용 목록 조회 실패: {e}", exc_info=True)
            raise TransientFetchError("관리자 허용 목록을 조회하지 못했습니다.") from e
        return len(docs) > 0

    def check_admin_by_email(self, email: str) -> bool:
        return self.is_admin(email)

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        token_data = DateTimeUtils.for_firestore({
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires,
        })
        self.revoked_tokens_ref.document(jti).set(token_data)

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload.get('jti')
        if not jti:
            return False
        return self.revoked_tokens_ref.document(jti).get().exists
