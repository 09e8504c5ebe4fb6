# pawtrail/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from pawtrail.utils.datetime_utils import DateTimeUtils

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    사용자명(username)이 곧 문서 ID이자 user_id 입니다.
    """
    user_id: str
    display_name: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        processed = DateTimeUtils.from_firestore(data)
        return cls(
            user_id=processed['user_id'],
            display_name=processed.get('display_name') or processed['user_id'],
            created_at=processed.get('created_at') or DateTimeUtils.now(),
            updated_at=processed.get('updated_at'),
        )

    def snapshot(self) -> Dict[str, Any]:
        """활동 피드에 함께 실리는 작성자 요약 정보."""
        return {'user_id': self.user_id, 'display_name': self.display_name}
