# 파일 경로: waste_admin/services/identity_service.py

import logging
from typing import Dict, Any, Optional

import requests
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from waste_admin.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

# Identity Toolkit REST API가 돌려주는 오류 코드 -> 사용자 메시지
_SIGN_IN_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "이메일 또는 비밀번호가 올바르지 않습니다.",
    "INVALID_PASSWORD": "이메일 또는 비밀번호가 올바르지 않습니다.",
    "INVALID_LOGIN_CREDENTIALS": "이메일 또는 비밀번호가 올바르지 않습니다.",
    "USER_DISABLED": "비활성화된 계정입니다.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "로그인 시도가 너무 많습니다. 잠시 후 다시 시도해주세요.",
}

class IdentityService:
    """
    Firebase Authentication과의 실제 통신을 담당하는 서비스 클래스입니다.

    - 이메일/비밀번호 로그인: Admin SDK가 지원하지 않으므로 Identity Toolkit REST API 사용
    - 계정 생성/삭제, 세션(Refresh Token) 무효화: firebase_admin.auth 사용
    """

    def __init__(self, api_key: Optional[str], base_url: str, timeout: float = 10):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """자격 증명을 확인하고 uid, email, 토큰 정보를 반환합니다."""
        if not self.api_key:
            raise AuthenticationError("FIREBASE_WEB_API_KEY가 설정되지 않았습니다.", "IDENTITY_NOT_CONFIGURED")

        try:
            response = requests.post(
                f"{self.base_url}/accounts:signInWithPassword",
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Identity Toolkit 요청 실패 (email: {email}): {e}")
            raise AuthenticationError("인증 서버에 연결할 수 없습니다.", "IDENTITY_PROVIDER_UNAVAILABLE") from e

        if response.status_code != 200:
            code = self._extract_error_code(response)
            logger.warning(f"로그인 거부 (email: {email}, code: {code})")
            message = _SIGN_IN_ERROR_MESSAGES.get(code, "로그인에 실패했습니다.")
            raise AuthenticationError(message)

        payload = response.json()
        return {
            "uid": payload["localId"],
            "email": payload.get("email", email),
            "display_name": payload.get("displayName") or None,
            "id_token": payload.get("idToken"),
            "refresh_token": payload.get("refreshToken"),
        }

    @staticmethod
    def _extract_error_code(response) -> str:
        try:
            message = response.json().get("error", {}).get("message", "")
        except ValueError:
            return "UNKNOWN"
        # 예: "WEAK_PASSWORD : Password should be at least 6 characters"
        return message.split(" ")[0] if message else "UNKNOWN"

    def create_user(self, email: str, password: str, display_name: str) -> str:
        """새 계정을 만들고 uid를 반환합니다."""
        try:
            user = firebase_auth.create_user(email=email, password=password, display_name=display_name)
            logger.info(f"Firebase Auth 사용자 생성 성공 (uid: {user.uid})")
            return user.uid
        except firebase_auth.EmailAlreadyExistsError as e:
            raise AuthenticationError("이미 가입된 이메일입니다.", "EMAIL_EXISTS") from e
        except ValueError as e:
            # 잘못된 이메일 형식, 6자 미만 비밀번호 등은 SDK가 ValueError로 거부합니다.
            raise AuthenticationError(str(e), "INVALID_CREDENTIALS") from e
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"Firebase Auth 사용자 생성 실패 (email: {email}): {e}")
            raise AuthenticationError("계정을 생성할 수 없습니다.", "SIGNUP_REJECTED") from e

    def delete_user(self, uid: str):
        try:
            firebase_auth.delete_user(uid)
            logger.info(f"Firebase Auth 사용자 삭제 성공 (uid: {uid})")
        except firebase_auth.UserNotFoundError:
            logger.warning(f"Firebase Auth에서 이미 삭제된 사용자입니다 (uid: {uid}).")

    def revoke_refresh_tokens(self, uid: str):
        """사용자의 모든 Refresh Token을 무효화하여 세션을 종료합니다."""
        try:
            firebase_auth.revoke_refresh_tokens(uid)
        except firebase_auth.UserNotFoundError:
            # 없는 사용자는 이미 로그아웃된 상태로 간주합니다.
            logger.warning(f"세션 종료 대상 사용자가 없습니다 (uid: {uid}).")
