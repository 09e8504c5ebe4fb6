# pawtrail/models/dog.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from pawtrail.utils.datetime_utils import DateTimeUtils

@dataclass
class Dog:
    """
    Firestore 'dogs' 컬렉션 문서 구조.
    한 사용자의 '활성 반려견'은 is_active=True 인 문서 중 가장 최근에 생성된 것입니다.
    """
    dog_id: str
    user_id: str
    name: str = "Buddy"
    breed: Optional[str] = "Golden Retriever"
    photo_url: Optional[str] = None
    birth_date: Optional[datetime] = None
    weight: Optional[int] = None  # 파운드 단위
    is_active: bool = True
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dog":
        """Firestore에서 받은 딕셔너리로부터 Dog 인스턴스를 생성합니다."""
        processed = DateTimeUtils.from_firestore(data)
        known = {k: v for k, v in processed.items() if k in cls.__dataclass_fields__}
        return cls(**known)
