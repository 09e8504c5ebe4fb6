# pawtrail/api/activity/services.py
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from pawtrail.api.users.services import UserService
from pawtrail.api.walks.services import WalkSessionService
from pawtrail.models.activity import ActivityItem
from pawtrail.models.feeding import Feeding
from pawtrail.utils.datetime_utils import DateTimeUtils

def merge_activities(items: Iterable[ActivityItem]) -> List[ActivityItem]:
    """
    서로 다른 타입의 활동 항목을 하나의 목록으로 합칩니다.
    timestamp 내림차순, 같은 시각이면 (타입명, id) 오름차순으로 정렬 결과가 항상 같습니다.
    """
    # 안정 정렬을 두 번 적용: 보조 키 오름차순 후 timestamp 내림차순
    ordered = sorted(items, key=lambda item: item.sort_key())
    return sorted(ordered, key=lambda item: item.timestamp, reverse=True)


class ActivityService:
    """
    완료된 산책과 급식 기록을 하나의 시간순 활동 피드로 합치는 서비스.
    일자별 그룹화나 타입 필터는 화면 쪽에서 처리하며 이 서비스는 정렬된 전체 목록만 제공합니다.
    """
    def __init__(self, db, walk_service: WalkSessionService, user_service: UserService):
        self.db = db
        self.walks_ref = self.db.collection('walks')
        self.feedings_ref = self.db.collection('feedings')
        self.walk_service = walk_service
        self.user_service = user_service
        logging.info("ActivityService initialized.")

    def _completed_walks_query(self):
        # 진행 중인 산책은 활동 기록에 나타나지 않습니다.
        return self.walks_ref.where(filter=FieldFilter('is_completed', '==', True))

    def _to_items(self, walk_docs, feeding_docs) -> List[ActivityItem]:
        users_cache: Dict[str, Dict[str, Any]] = {}
        items = []
        for doc in walk_docs:
            walk = self.walk_service.with_events(doc.to_dict())
            user = self.user_service.get_user_snapshot(walk.user_id, users_cache)
            items.append(ActivityItem.from_walk(walk, user))
        for doc in feeding_docs:
            feeding = Feeding.from_dict(doc.to_dict())
            user = self.user_service.get_user_snapshot(feeding.user_id, users_cache)
            items.append(ActivityItem.from_feeding(feeding, user))
        return items

    def get_recent_activity(self, limit: int = 20) -> List[ActivityItem]:
        """
        최근 활동 limit 개를 반환합니다.

        두 스트림에서 각각 limit 개씩 가져온 뒤 합치고 잘라냅니다. 실제 상위 limit 개 안에
        한 타입이 limit 개를 넘게 들어갈 수는 없으므로, 어떤 순서로 기록이 섞여 있어도
        결과는 전체 합집합의 정확한 상위 limit 개입니다.
        """
        if limit <= 0:
            return []

        #  중요: (is_completed, start_time) 복합 색인이 필요합니다.
        walk_docs = self._completed_walks_query() \
            .order_by('start_time', direction=firestore.Query.DESCENDING) \
            .limit(limit) \
            .stream()
        feeding_docs = self.feedings_ref \
            .order_by('timestamp', direction=firestore.Query.DESCENDING) \
            .limit(limit) \
            .stream()

        merged = merge_activities(self._to_items(walk_docs, feeding_docs))
        return merged[:limit]

    def get_activity_by_date_range(self, start: datetime, end: datetime) -> List[ActivityItem]:
        """
        [start, end] 구간(양 끝 포함)에 속한 모든 활동을 개수 제한 없이 반환합니다.
        산책은 start_time, 급식은 timestamp 기준입니다.
        """
        start = DateTimeUtils.ensure_utc(start)
        end = DateTimeUtils.ensure_utc(end)
        if start > end:
            raise ValueError("조회 시작 시각이 종료 시각보다 늦을 수 없습니다.")

        walk_docs = self._completed_walks_query() \
            .where(filter=FieldFilter('start_time', '>=', start)) \
            .where(filter=FieldFilter('start_time', '<=', end)) \
            .order_by('start_time', direction=firestore.Query.DESCENDING) \
            .stream()
        feeding_docs = self.feedings_ref \
            .where(filter=FieldFilter('timestamp', '>=', start)) \
            .where(filter=FieldFilter('timestamp', '<=', end)) \
            .order_by('timestamp', direction=firestore.Query.DESCENDING) \
            .stream()

        items = merge_activities(self._to_items(walk_docs, feeding_docs))
        logging.info(f"Activity range {start.isoformat()} ~ {end.isoformat()}: {len(items)} items")
        return items
