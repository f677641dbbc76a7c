# waste_admin/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 대시보드가 발급하는 JWT 토큰의 서명 키입니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # Firebase Authentication REST API(이메일/비밀번호 로그인)에 필요한 웹 API 키입니다.
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')
    IDENTITY_TOOLKIT_URL = os.getenv('IDENTITY_TOOLKIT_URL', 'https://identitytoolkit.googleapis.com/v1')
    IDENTITY_TIMEOUT_SECONDS = float(os.getenv('IDENTITY_TIMEOUT_SECONDS', 10))

    # 폐기물 로그 뷰어 설정
    WASTE_LOGS_PAGE_SIZE = int(os.getenv('WASTE_LOGS_PAGE_SIZE', 10))
    ENRICH_MAX_WORKERS = int(os.getenv('ENRICH_MAX_WORKERS', 8))

    # Firestore 컬렉션 이름 (모바일 앱과 공유하는 컬렉션이므로 기존 이름을 그대로 사용)
    WASTE_LOGS_COLLECTION = 'waste_management_id'
    WASTE_TYPES_COLLECTION = 'waste_type'
    USERS_COLLECTION = 'user_id'
    ADMINS_COLLECTION = 'admin_id'
    REVOKED_TOKENS_COLLECTION = 'revoked_tokens'

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트의 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    # 테스트에서는 .env 없이도 토큰을 발급할 수 있도록 기본 키를 둡니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'waste-admin-testing-secret-key-0123456789')
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY', 'testing-api-key')

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
