# pawtrail/core/config.py

import os
from datetime import timedelta


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('true', '1', 'yes')


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. 토큰 위변조 방지에 사용됩니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 12)))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_REFRESH_TOKEN_EXPIRES_DAYS', 30)))

    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')

    # 활동 피드 조회 개수 (GET /api/activity?limit=)
    ACTIVITY_DEFAULT_LIMIT = int(os.getenv('ACTIVITY_DEFAULT_LIMIT', 20))
    ACTIVITY_MAX_LIMIT = int(os.getenv('ACTIVITY_MAX_LIMIT', 100))

    # 진행 중인 산책 화면의 권장 폴링 주기 (X-Poll-Interval 응답 헤더로 전달)
    WALK_POLL_INTERVAL_SECONDS = int(os.getenv('WALK_POLL_INTERVAL_SECONDS', 5))

    # False 이면 가족 구성원 누구나 급식 기록을 수정/삭제할 수 있습니다.
    FEEDING_EDIT_OWNER_ONLY = _env_bool('FEEDING_EDIT_OWNER_ONLY', False)


class DevelopmentConfig(Config):
    """개발 환경 설정."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경 설정. 테스트에서는 Firestore 클라이언트를 직접 주입합니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'pawtrail-testing-secret-key-0123456789abcdef')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FEEDING_EDIT_OWNER_ONLY = False


class ProductionConfig(Config):
    """운영 환경 설정."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# FLASK_ENV 값에 따라 create_app 에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
