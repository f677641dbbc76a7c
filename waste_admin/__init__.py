# waste_admin/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정 / 예외
from waste_admin.core.config import config_by_name
from waste_admin.core.errors import DashboardError

# - API 블루프린트
from waste_admin.api.auth.routes import auth_bp
from waste_admin.api.users.routes import users_bp
from waste_admin.api.waste_logs.routes import waste_logs_bp

# - 서비스 모듈
from waste_admin.services.identity_service import IdentityService
from waste_admin.api.auth.services import AuthService
from waste_admin.api.waste_logs.services import WasteLogService
from waste_admin.api.waste_logs.viewer import ViewerRegistry

def create_app(config_name=None, db=None, identity_service=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param db: Firestore 클라이언트. 없으면 서비스 계정으로 Firebase를 초기화해 생성합니다.
    :param identity_service: 인증 제공자 래퍼. 없으면 설정값으로 IdentityService를 생성합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화 (프로세스당 한 번)
    # =====================================================================================
    jwt_manager = JWTManager(app)

    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
        db = firestore.client()

    if identity_service is None:
        identity_service = IdentityService(
            api_key=app.config['FIREBASE_WEB_API_KEY'],
            base_url=app.config['IDENTITY_TOOLKIT_URL'],
            timeout=app.config['IDENTITY_TIMEOUT_SECONDS']
        )

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    app.services['auth'] = AuthService(
        db,
        identity_service,
        users_collection=app.config['USERS_COLLECTION'],
        admins_collection=app.config['ADMINS_COLLECTION'],
        revoked_tokens_collection=app.config['REVOKED_TOKENS_COLLECTION']
    )
    app.services['waste_logs'] = WasteLogService(
        db,
        page_size=app.config['WASTE_LOGS_PAGE_SIZE'],
        max_workers=app.config['ENRICH_MAX_WORKERS'],
        logs_collection=app.config['WASTE_LOGS_COLLECTION'],
        types_collection=app.config['WASTE_TYPES_COLLECTION']
    )
    app.services['waste_log_viewers'] = ViewerRegistry(app.services['waste_logs'])
    logging.info("Dashboard services initialized successfully")

    @jwt_manager.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(waste_logs_bp, url_prefix='/api/waste-logs')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(DashboardError)
    def handle_dashboard_error(err):
        if err.status_code >= 500:
            logging.error(f"{err.error_code}: {err.message}", exc_info=True)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리 (404, 405 등 HTTP 예외는 그대로 반환)
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
