# pawtrail/api/walks/services.py
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import Conflict, FailedPrecondition, NotFound
from google.cloud.firestore_v1.base_query import FieldFilter

from pawtrail.models.walk import Walk, WalkEvent, WalkEventType
from pawtrail.services.firestore_service import delete_collection, first_document
from pawtrail.utils.datetime_utils import DateTimeUtils

# 산책 수정 API에서 반영을 허용하는 필드 목록
WALK_MUTABLE_FIELDS = ('start_time', 'end_time', 'duration')

# 가드 문서가 커밋 직전에 바뀐 경우 다시 읽어서 커밋하는 최대 횟수
GUARD_RELEASE_ATTEMPTS = 3


class ActiveWalkConflictError(Exception):
    """같은 사용자에게 이미 진행 중인 산책이 있어 새 산책을 시작할 수 없는 경우."""
    retryable = True

    def __init__(self, user_id: str, active_walk_id: Optional[str] = None):
        self.user_id = user_id
        self.active_walk_id = active_walk_id
        super().__init__(f"이미 진행 중인 산책이 있습니다 (user_id: {user_id}).")


class WalkSessionService:
    """
    산책 세션(시작, 이벤트 기록, 완료, 수정, 삭제)을 전담하는 서비스.

    사용자당 진행 중인 산책은 최대 1개입니다. 이를 보장하기 위해 산책 시작 시
    'active_walks/{user_id}' 가드 문서를 create() 로 만들고, 산책 문서와 같은
    WriteBatch 로 커밋합니다. 가드 문서가 이미 있으면 커밋 전체가 실패하므로
    여러 기기에서 동시에 시작 요청이 와도 하나만 성공합니다.
    완료/삭제 시 가드 해제는 읽은 시점의 update_time 을 전제 조건으로 걸어, 그 사이 다시 시작된
    다른 산책의 가드를 지우지 않습니다.
    """
    def __init__(self, db):
        self.db = db
        self.walks_ref = self.db.collection('walks')
        self.active_walks_ref = self.db.collection('active_walks')
        logging.info("WalkSessionService initialized.")

    # --- 내부 헬퍼 ---
    def _events_ref(self, walk_id: str):
        return self.walks_ref.document(walk_id).collection('events')

    def _load_events(self, walk_id: str) -> List[WalkEvent]:
        docs = self._events_ref(walk_id).order_by('timestamp').stream()
        events = [WalkEvent.from_dict(doc.to_dict()) for doc in docs]
        # 저장소 정렬과 무관하게 타임스탬프 오름차순을 보장
        return sorted(events, key=lambda e: e.timestamp)

    def _get_walk_doc(self, walk_id: str) -> Dict[str, Any]:
        doc = self.walks_ref.document(walk_id).get()
        if not doc.exists:
            raise FileNotFoundError(f"해당 ID의 산책을 찾을 수 없습니다: {walk_id}")
        return doc.to_dict()

    def _check_owner(self, walk_data: Dict[str, Any], user_id: Optional[str]):
        if user_id is not None and walk_data.get('user_id') != user_id:
            raise PermissionError("해당 산책을 수정할 권한이 없습니다.")

    def with_events(self, walk_data: Dict[str, Any]) -> Walk:
        """산책 문서에 events 하위 컬렉션을 붙여 Walk 객체로 만듭니다."""
        return Walk.from_dict(walk_data, events=self._load_events(walk_data['walk_id']))

    # --- 세션 조작 ---
    def start_walk(self, user_id: str, start_time: Optional[datetime] = None) -> Walk:
        """
        새 산책을 시작합니다. start_time 을 생략하면 현재 시각, 지정하면 과거 시각으로 기록합니다.

        Raises:
            ActiveWalkConflictError: 이미 진행 중인 산책이 있는 경우 (재시도 가능)
        """
        walk_id = str(uuid.uuid4())
        new_walk = Walk(
            walk_id=walk_id,
            user_id=user_id,
            start_time=DateTimeUtils.ensure_utc(start_time) if start_time else DateTimeUtils.now(),
        )
        guard_ref = self.active_walks_ref.document(user_id)

        batch = self.db.batch()
        batch.create(guard_ref, DateTimeUtils.for_firestore({
            'user_id': user_id,
            'walk_id': walk_id,
            'started_at': new_walk.start_time,
        }))
        batch.set(self.walks_ref.document(walk_id), DateTimeUtils.for_firestore(new_walk.to_dict()))
        try:
            batch.commit()
        except Conflict as e:
            guard = guard_ref.get()
            active_walk_id = guard.to_dict().get('walk_id') if guard.exists else None
            logging.warning(f"Walk start rejected for user {user_id}: active walk {active_walk_id} exists ({e})")
            raise ActiveWalkConflictError(user_id, active_walk_id)

        logging.info(f"Walk {walk_id} started for user {user_id} at {new_walk.start_time.isoformat()}")
        return new_walk

    def get_active_walk(self, user_id: str) -> Optional[Walk]:
        """
        사용자의 진행 중인(is_completed=False) 산책 중 가장 최근 것을 이벤트와 함께 반환합니다.
        클라이언트가 주기적으로 폴링하는 조회이며 어떤 상태도 변경하지 않습니다.
        """
        #  중요: (user_id, is_completed, start_time) 복합 색인이 필요합니다.
        query = self.walks_ref \
            .where(filter=FieldFilter('user_id', '==', user_id)) \
            .where(filter=FieldFilter('is_completed', '==', False)) \
            .order_by('start_time', direction=firestore.Query.DESCENDING)
        walk_data = first_document(query)
        if walk_data is None:
            return None
        return self.with_events(walk_data)

    def log_event(self, walk_id: str, event_type: WalkEventType,
                  timestamp: Optional[datetime] = None, user_id: Optional[str] = None) -> WalkEvent:
        """
        산책에 배변 이벤트(pee/poo)를 추가합니다.
        이미 완료된 산책에도 추가할 수 있으며, 이 경우 경고 로그를 남깁니다.
        """
        walk_data = self._get_walk_doc(walk_id)
        self._check_owner(walk_data, user_id)
        if walk_data.get('is_completed'):
            logging.warning(f"Event appended to completed walk {walk_id}")

        event = WalkEvent(
            event_id=str(uuid.uuid4()),
            walk_id=walk_id,
            event_type=WalkEventType(event_type),
            timestamp=DateTimeUtils.ensure_utc(timestamp) if timestamp else DateTimeUtils.now(),
        )
        # 산책 문서 갱신과 같은 batch 로 커밋하므로, 그 사이 산책이 삭제됐다면 이벤트도 남지 않습니다.
        batch = self.db.batch()
        batch.set(self._events_ref(walk_id).document(event.event_id), DateTimeUtils.for_firestore(event.to_dict()))
        batch.update(self.walks_ref.document(walk_id), {'updated_at': DateTimeUtils.now()})
        try:
            batch.commit()
        except NotFound:
            raise FileNotFoundError(f"해당 ID의 산책을 찾을 수 없습니다: {walk_id}")
        logging.info(f"Walk event '{event.event_type.value}' logged for walk {walk_id}")
        return event

    def complete_walk(self, walk_id: str, end_time: datetime, duration: int,
                      user_id: Optional[str] = None) -> Walk:
        """
        산책을 완료 처리합니다. duration(분)은 호출자가 계산한 값을 그대로 신뢰하며,
        end_time 이 start_time 보다 뒤인지도 검증하지 않습니다.
        사용자의 가드 문서가 이 산책을 가리키면 같은 batch 에서 함께 해제합니다.
        """
        walk_data = self._get_walk_doc(walk_id)
        self._check_owner(walk_data, user_id)

        walk_ref = self.walks_ref.document(walk_id)
        completion = DateTimeUtils.for_firestore({
            'is_completed': True,
            'end_time': end_time,
            'duration': duration,
        })
        self._commit_releasing_guard(
            lambda batch: batch.update(walk_ref, completion),
            walk_data['user_id'], walk_id
        )

        logging.info(f"Walk {walk_id} completed ({duration} min)")
        return self.get_walk(walk_id)

    def update_walk(self, walk_id: str, update_data: Dict[str, Any],
                    user_id: Optional[str] = None) -> Walk:
        """기록 정정을 위한 부분 업데이트. duration 을 start/end 로 재계산하지 않습니다."""
        walk_data = self._get_walk_doc(walk_id)
        self._check_owner(walk_data, user_id)

        updates = {k: v for k, v in update_data.items() if k in WALK_MUTABLE_FIELDS}
        if not updates:
            raise ValueError("수정할 데이터가 제공되지 않았습니다.")

        self.walks_ref.document(walk_id).update(DateTimeUtils.for_firestore(updates))
        logging.info(f"Walk {walk_id} updated with fields: {list(updates.keys())}")
        return self.get_walk(walk_id)

    def delete_walk(self, walk_id: str, user_id: Optional[str] = None):
        """산책과 그 하위 이벤트를 모두 삭제합니다. 진행 중인 산책이었다면 가드 문서도 해제합니다."""
        walk_data = self._get_walk_doc(walk_id)
        self._check_owner(walk_data, user_id)

        walk_ref = self.walks_ref.document(walk_id)
        self._commit_releasing_guard(lambda batch: batch.delete(walk_ref), walk_data['user_id'], walk_id)

        # 산책 문서가 사라진 뒤에는 log_event 커밋이 실패하므로, 이후의 정리로 이벤트가 모두 지워집니다.
        deleted_events = delete_collection(self.db, self._events_ref(walk_id))
        logging.info(f"Walk {walk_id} deleted with {deleted_events} events")

    def _commit_releasing_guard(self, apply_writes, user_id: str, walk_id: str):
        """
        apply_writes 로 채운 batch 를 커밋하면서, 가드 문서가 이 산책을 가리키면 함께 삭제합니다.

        가드 삭제에는 읽은 시점의 update_time 을 전제 조건으로 겁니다. 그 사이 다른 기기가
        가드를 지우고 새 산책으로 다시 만들었다면 커밋이 거부되고, 가드를 다시 읽어 재시도합니다.
        """
        guard_ref = self.active_walks_ref.document(user_id)
        for attempt in range(1, GUARD_RELEASE_ATTEMPTS + 1):
            batch = self.db.batch()
            apply_writes(batch)
            guard = guard_ref.get()
            if guard.exists and guard.to_dict().get('walk_id') == walk_id:
                batch.delete(guard_ref, option=self.db.write_option(last_update_time=guard.update_time))
            try:
                batch.commit()
                return
            except FailedPrecondition as e:
                logging.warning(f"Guard for user {user_id} changed before commit (walk {walk_id}, attempt {attempt}): {e}")
                if attempt == GUARD_RELEASE_ATTEMPTS:
                    raise
            except NotFound:
                raise FileNotFoundError(f"해당 ID의 산책을 찾을 수 없습니다: {walk_id}")

    # --- 조회 ---
    def get_walk(self, walk_id: str) -> Walk:
        """산책 하나를 이벤트와 함께 조회합니다."""
        return self.with_events(self._get_walk_doc(walk_id))

    def get_user_walks(self, user_id: str, limit: int = 10) -> List[Walk]:
        """사용자의 산책 목록을 시작 시각 내림차순으로 조회합니다."""
        query = self.walks_ref \
            .where(filter=FieldFilter('user_id', '==', user_id)) \
            .order_by('start_time', direction=firestore.Query.DESCENDING) \
            .limit(limit)
        return [self.with_events(doc.to_dict()) for doc in query.stream()]
