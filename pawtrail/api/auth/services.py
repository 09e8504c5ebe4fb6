# pawtrail/api/auth/services.py
import logging
from datetime import datetime, timezone
from typing import Optional

from pawtrail.api.users.services import UserService
from pawtrail.models.user import User
from pawtrail.utils.datetime_utils import DateTimeUtils

class AuthService:
    """
    사용자명 기반 간단 로그인과 토큰 무효화(Blocklist)를 담당합니다.
    비밀번호 없이 사용자명만으로 식별하며, 신원은 JWT identity 로 전달됩니다.
    """
    def __init__(self, db, user_service: UserService):
        self.db = db
        self.revoked_tokens_ref = self.db.collection('revoked_tokens')
        self.user_service = user_service
        logging.info("AuthService initialized.")

    def login(self, username: str, display_name: Optional[str] = None) -> User:
        """최초 로그인이면 사용자를 생성하고, 아니면 기존 사용자를 반환합니다."""
        user = self.user_service.upsert_user(username, display_name)
        logging.info(f"User logged in: {user.user_id}")
        return user

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        token_data = {
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires,
        }
        self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        jti = jwt_payload['jti']
        return self.revoked_tokens_ref.document(jti).get().exists

    def logout(self, jwt_payload: dict):
        """현재 요청에 사용된 토큰을 무효화합니다."""
        expires = datetime.fromtimestamp(jwt_payload['exp'], tz=timezone.utc)
        self.add_token_to_blocklist(jwt_payload['jti'], expires)
        logging.info(f"User logged out. JTI: {jwt_payload['jti'][:8]}...")
