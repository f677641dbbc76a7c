# waste_admin/core/errors.py
"""
대시보드 전역에서 사용하는 예외 계층.

서비스 계층은 아래 예외만 밖으로 던지고, create_app에 등록된 전역 에러 핸들러가
{"error_code", "message"} 형태의 JSON 응답으로 변환합니다.
"""
from typing import Optional


class DashboardError(Exception):
    """모든 도메인 예외의 기반 클래스"""
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class AuthenticationError(DashboardError):
    """잘못된 자격 증명, 또는 인증 제공자가 요청을 거부한 경우"""
    status_code = 401
    error_code = "AUTHENTICATION_FAILED"


class AuthorizationError(DashboardError):
    """자격 증명은 유효하지만 관리자가 아닌 경우"""
    status_code = 403
    error_code = "NOT_AN_ADMIN"


class NotFoundError(DashboardError):
    status_code = 404
    error_code = "NOT_FOUND"


class FetchInProgressError(DashboardError):
    """이전 페이지 조회가 아직 끝나지 않았을 때 들어온 조회 요청"""
    status_code = 409
    error_code = "FETCH_IN_PROGRESS"


class TransientFetchError(DashboardError):
    """페이지 조회 또는 참조 데이터 조회 중 발생한 네트워크/저장소 오류"""
    status_code = 503
    error_code = "FETCH_FAILED"
