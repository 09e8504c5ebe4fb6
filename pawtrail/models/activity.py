# pawtrail/models/activity.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .walk import Walk, WalkEvent
from .feeding import Feeding

class ActivityType(Enum):
    WALK = "walk"
    FEEDING = "feeding"

@dataclass(frozen=True)
class ActivityItem:
    """
    통합 활동 피드의 한 항목 (저장되지 않는 파생 데이터).
    type 판별자에 따라 data 는 Walk 또는 Feeding 이며, events 는 산책 항목에만 존재합니다.
    """
    id: str
    type: ActivityType
    timestamp: datetime
    user: Dict[str, Any]
    data: Union[Walk, Feeding]
    events: Optional[List[WalkEvent]] = None

    def __post_init__(self):
        if self.type is ActivityType.WALK:
            if not isinstance(self.data, Walk) or self.events is None:
                raise TypeError("walk 항목에는 Walk 데이터와 events 목록이 필요합니다.")
        elif self.type is ActivityType.FEEDING:
            if not isinstance(self.data, Feeding) or self.events is not None:
                raise TypeError("feeding 항목에는 Feeding 데이터만 허용됩니다.")
        else:
            raise TypeError(f"알 수 없는 활동 타입입니다: {self.type}")

    @classmethod
    def from_walk(cls, walk: Walk, user: Dict[str, Any]) -> "ActivityItem":
        # 산책 항목의 정렬 기준은 종료/생성 시각이 아닌 시작 시각입니다.
        return cls(
            id=walk.walk_id,
            type=ActivityType.WALK,
            timestamp=walk.start_time,
            user=user,
            data=walk,
            events=list(walk.events),
        )

    @classmethod
    def from_feeding(cls, feeding: Feeding, user: Dict[str, Any]) -> "ActivityItem":
        return cls(
            id=feeding.feeding_id,
            type=ActivityType.FEEDING,
            timestamp=feeding.timestamp,
            user=user,
            data=feeding,
        )

    def sort_key(self):
        """동일 시각일 때의 순서를 고정하기 위한 보조 정렬 키 (타입명, id)."""
        return (self.type.value, self.id)
