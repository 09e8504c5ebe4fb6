# pawtrail/models/walk.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pawtrail.utils.datetime_utils import DateTimeUtils

class WalkEventType(Enum):
    PEE = "pee"
    POO = "poo"

@dataclass
class WalkEvent:
    """
    Firestore 'walks/{walk_id}/events' 하위 컬렉션 문서 구조.
    생성 후에는 수정되지 않습니다.
    """
    event_id: str
    walk_id: str
    event_type: WalkEventType
    timestamp: datetime
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalkEvent":
        processed = DateTimeUtils.from_firestore(data)
        return cls(
            event_id=processed['event_id'],
            walk_id=processed['walk_id'],
            event_type=WalkEventType(processed['event_type']),
            timestamp=processed['timestamp'],
            created_at=processed.get('created_at') or processed['timestamp'],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'walk_id': self.walk_id,
            'event_type': self.event_type.value,
            'timestamp': self.timestamp,
            'created_at': self.created_at,
        }

@dataclass
class Walk:
    """
    Firestore 'walks' 컬렉션 문서 구조.
    is_completed=False 인 산책이 '진행 중인 산책'이며, 사용자당 최대 1개만 존재합니다.
    events 는 조회 시에만 채워지며 문서 자체에는 저장되지 않습니다.
    """
    walk_id: str
    user_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # 분 단위
    is_completed: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    events: List[WalkEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], events: Optional[List[WalkEvent]] = None) -> "Walk":
        processed = DateTimeUtils.from_firestore(data)
        return cls(
            walk_id=processed['walk_id'],
            user_id=processed['user_id'],
            start_time=processed['start_time'],
            end_time=processed.get('end_time'),
            duration=processed.get('duration'),
            is_completed=bool(processed.get('is_completed', False)),
            created_at=processed.get('created_at') or processed['start_time'],
            events=sorted(events or [], key=lambda e: e.timestamp),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 딕셔너리 (events 제외)."""
        return {
            'walk_id': self.walk_id,
            'user_id': self.user_id,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'duration': self.duration,
            'is_completed': self.is_completed,
            'created_at': self.created_at,
        }
