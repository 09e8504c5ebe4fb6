# pawtrail/__init__.py

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
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from pawtrail.core.config import config_by_name

# - API 블루프린트
from pawtrail.api.auth.routes import auth_bp
from pawtrail.api.users.routes import users_bp
from pawtrail.api.dogs.routes import dogs_bp
from pawtrail.api.walks.routes import walks_bp
from pawtrail.api.feedings.routes import feedings_bp
from pawtrail.api.activity.routes import activity_bp

# - 서비스 모듈
from pawtrail.api.auth.services import AuthService
from pawtrail.api.users.services import UserService
from pawtrail.api.dogs.services import DogService
from pawtrail.api.walks.services import WalkSessionService
from pawtrail.api.feedings.services import FeedingService
from pawtrail.api.activity.services import ActivityService


def _init_firestore(app: Flask):
    """firebase_admin 을 초기화하고 Firestore 클라이언트를 반환합니다."""
    if not firebase_admin._apps:
        cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
        options = {}
        if app.config.get('FIREBASE_PROJECT_ID'):
            options['projectId'] = app.config['FIREBASE_PROJECT_ID']
        if cred_path:
            if not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            firebase_admin.initialize_app(credentials.Certificate(cred_path), options)
        else:
            # 인증 파일이 없으면 Application Default Credentials 를 사용합니다.
            firebase_admin.initialize_app(options=options)
    return firestore.client()


def create_app(config_name: str = None, db=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' / 'testing' / 'production'. 생략 시 FLASK_ENV 사용
    :param db: 주입할 Firestore 클라이언트. 생략하면 firebase_admin 으로 생성합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    if not app.config.get('JWT_SECRET_KEY'):
        raise ValueError("JWT_SECRET_KEY 환경 변수가 설정되지 않았습니다.")

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    jwt = JWTManager(app)

    if db is None:
        db = _init_firestore(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 사용자 서비스
    app.services['users'] = UserService(db)
    app.services['auth'] = AuthService(db, user_service=app.services['users'])

    # 5-2. 도메인 서비스
    app.services['dogs'] = DogService(db, user_service=app.services['users'])
    app.services['walks'] = WalkSessionService(db)
    app.services['feedings'] = FeedingService(
        db,
        user_service=app.services['users'],
        owner_only=app.config['FEEDING_EDIT_OWNER_ONLY']
    )
    app.services['activity'] = ActivityService(
        db,
        walk_service=app.services['walks'],
        user_service=app.services['users']
    )

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(dogs_bp, url_prefix='/api/dogs')
    app.register_blueprint(walks_bp, url_prefix='/api/walks')
    app.register_blueprint(feedings_bp, url_prefix='/api/feedings')
    app.register_blueprint(activity_bp, url_prefix='/api/activity')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(404)
    def handle_not_found(err):
        return jsonify({"error_code": "NOT_FOUND", "message": "요청한 리소스를 찾을 수 없습니다."}), 404

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return jsonify({"error_code": err.name.upper().replace(" ", "_"), "message": err.description}), err.code
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
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
