# pawtrail/api/users/services.py
import logging
from dataclasses import asdict
from typing import Dict, Any, Optional

from pawtrail.models.user import User
from pawtrail.utils.datetime_utils import DateTimeUtils

class UserService:
    """사용자(가족 구성원) 문서의 생성 및 조회를 전담하는 서비스."""
    def __init__(self, db):
        self.db = db
        self.users_ref = self.db.collection('users')
        logging.info("UserService initialized.")

    @staticmethod
    def normalize_username(username: Any) -> str:
        """사용자명을 정규화합니다. 비어 있으면 ValueError."""
        if not isinstance(username, str) or not username.strip():
            raise ValueError("사용자명은 필수입니다.")
        return username.strip()

    def get_user(self, user_id: str) -> Optional[User]:
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.to_dict())

    def user_exists(self, user_id: str) -> bool:
        return self.users_ref.document(user_id).get().exists

    def create_user(self, username: str, display_name: Optional[str] = None) -> User:
        """신규 사용자를 생성합니다. 이미 존재하면 FileExistsError."""
        user_id = self.normalize_username(username)
        if self.user_exists(user_id):
            raise FileExistsError(f"이미 존재하는 사용자입니다: {user_id}")

        new_user = User(user_id=user_id, display_name=display_name or user_id)
        new_user.updated_at = new_user.created_at
        self.users_ref.document(user_id).set(DateTimeUtils.for_firestore(asdict(new_user)))
        logging.info(f"User created: {user_id}")
        return new_user

    def upsert_user(self, username: str, display_name: Optional[str] = None) -> User:
        """최초 로그인 시 사용자를 생성하고, 이미 있으면 updated_at 만 갱신합니다."""
        user_id = self.normalize_username(username)
        existing = self.get_user(user_id)
        if existing is None:
            return self.create_user(user_id, display_name)

        update_data: Dict[str, Any] = {'updated_at': DateTimeUtils.now()}
        if display_name:
            update_data['display_name'] = display_name
        self.users_ref.document(user_id).update(DateTimeUtils.for_firestore(update_data))
        return self.get_user(user_id)

    def get_user_snapshot(self, user_id: str, cache: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        활동 피드에 넣을 작성자 요약 정보를 반환합니다.
        cache 를 넘기면 한 번의 조회 안에서 같은 사용자를 다시 읽지 않습니다.
        사용자 문서가 없으면 user_id 를 표시 이름으로 사용합니다.
        """
        if cache is not None and user_id in cache:
            return cache[user_id]
        user = self.get_user(user_id)
        snapshot = user.snapshot() if user else {'user_id': user_id, 'display_name': user_id}
        if cache is not None:
            cache[user_id] = snapshot
        return snapshot
