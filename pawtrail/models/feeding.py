# pawtrail/models/feeding.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pawtrail.utils.datetime_utils import DateTimeUtils

class MealType(Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

class Portion(Enum):
    SMALL = "small"
    REGULAR = "regular"
    LARGE = "large"
    TREATS = "treats"

# 수정 API에서 반영을 허용하는 필드 목록. 그 외 필드는 조용히 무시됩니다.
FEEDING_MUTABLE_FIELDS = ('meal_type', 'portion', 'notes', 'timestamp')

@dataclass
class Feeding:
    """Firestore 'feedings' 컬렉션 문서 구조."""
    feeding_id: str
    user_id: str
    meal_type: MealType
    portion: Portion
    timestamp: datetime
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feeding":
        processed = DateTimeUtils.from_firestore(data)
        return cls(
            feeding_id=processed['feeding_id'],
            user_id=processed['user_id'],
            meal_type=MealType(processed['meal_type']),
            portion=Portion(processed['portion']),
            timestamp=processed['timestamp'],
            notes=processed.get('notes'),
            created_at=processed.get('created_at') or processed['timestamp'],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'feeding_id': self.feeding_id,
            'user_id': self.user_id,
            'meal_type': self.meal_type.value,
            'portion': self.portion.value,
            'timestamp': self.timestamp,
            'notes': self.notes,
            'created_at': self.created_at,
        }
