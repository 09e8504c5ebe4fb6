# pawtrail/api/feedings/services.py
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from pawtrail.api.users.services import UserService
from pawtrail.models.feeding import Feeding, MealType, Portion, FEEDING_MUTABLE_FIELDS
from pawtrail.services.firestore_service import first_document
from pawtrail.utils.datetime_utils import DateTimeUtils

class FeedingService:
    """
    급식 기록의 생성, 수정, 삭제, 조회를 전담하는 서비스.

    기본적으로 가족 구성원 누구나 다른 사람이 남긴 급식 기록을 수정/삭제할 수 있습니다.
    owner_only=True 로 생성하면 작성자 본인만 수정/삭제할 수 있습니다.
    """
    def __init__(self, db, user_service: UserService, owner_only: bool = False):
        self.db = db
        self.feedings_ref = self.db.collection('feedings')
        self.user_service = user_service
        self.owner_only = owner_only
        logging.info(f"FeedingService initialized (owner_only={owner_only}).")

    def _get_feeding_doc(self, feeding_id: str) -> Dict[str, Any]:
        doc = self.feedings_ref.document(feeding_id).get()
        if not doc.exists:
            raise FileNotFoundError(f"해당 ID의 급식 기록을 찾을 수 없습니다: {feeding_id}")
        return doc.to_dict()

    def _check_owner(self, feeding_data: Dict[str, Any], user_id: Optional[str]):
        if self.owner_only and user_id is not None and feeding_data.get('user_id') != user_id:
            raise PermissionError("본인이 작성한 급식 기록만 수정/삭제할 수 있습니다.")

    def create_feeding(self, user_id: str, feeding_data: Dict[str, Any]) -> Feeding:
        """급식 기록을 생성합니다. timestamp 를 생략하면 현재 시각으로 기록합니다."""
        timestamp = feeding_data.get('timestamp')
        feeding = Feeding(
            feeding_id=str(uuid.uuid4()),
            user_id=user_id,
            meal_type=MealType(feeding_data['meal_type']),
            portion=Portion(feeding_data['portion']),
            timestamp=DateTimeUtils.ensure_utc(timestamp) if timestamp else DateTimeUtils.now(),
            notes=feeding_data.get('notes'),
        )
        self.feedings_ref.document(feeding.feeding_id).set(DateTimeUtils.for_firestore(feeding.to_dict()))
        logging.info(f"Feeding {feeding.feeding_id} created by {user_id} ({feeding.meal_type.value}/{feeding.portion.value})")
        return feeding

    @staticmethod
    def filter_mutable_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
        """허용된 필드(meal_type, portion, notes, timestamp)만 남기고 나머지는 버립니다."""
        return {k: v for k, v in payload.items() if k in FEEDING_MUTABLE_FIELDS}

    def update_feeding(self, feeding_id: str, payload: Dict[str, Any], user_id: Optional[str] = None) -> Feeding:
        """
        급식 기록을 부분 수정합니다. 허용 목록 밖의 필드는 적용하지도, 거부하지도 않고 무시합니다.

        Raises:
            FileNotFoundError: 기록이 없는 경우
            ValueError: 허용된 필드가 하나도 없는 경우
        """
        feeding_data = self._get_feeding_doc(feeding_id)
        self._check_owner(feeding_data, user_id)

        updates = self.filter_mutable_fields(payload)
        if not updates:
            raise ValueError("수정할 수 있는 필드가 없습니다.")
        for key, enum_cls in (('meal_type', MealType), ('portion', Portion)):
            if key in updates:
                updates[key] = enum_cls(updates[key]).value
        if 'timestamp' in updates:
            updates['timestamp'] = DateTimeUtils.validate_datetime_field(updates['timestamp'], 'timestamp')

        self.feedings_ref.document(feeding_id).update(DateTimeUtils.for_firestore(updates))
        logging.info(f"Feeding {feeding_id} updated with fields: {list(updates.keys())}")
        return self.get_feeding(feeding_id)

    def delete_feeding(self, feeding_id: str, user_id: Optional[str] = None):
        feeding_data = self._get_feeding_doc(feeding_id)
        self._check_owner(feeding_data, user_id)
        self.feedings_ref.document(feeding_id).delete()
        logging.info(f"Feeding {feeding_id} deleted")

    def get_feeding(self, feeding_id: str) -> Feeding:
        return Feeding.from_dict(self._get_feeding_doc(feeding_id))

    def get_last_feeding(self) -> Optional[Tuple[Feeding, Dict[str, Any]]]:
        """가족 전체에서 가장 최근 급식 기록과 작성자 요약 정보를 반환합니다."""
        query = self.feedings_ref.order_by('timestamp', direction=firestore.Query.DESCENDING)
        data = first_document(query)
        if data is None:
            return None
        feeding = Feeding.from_dict(data)
        return feeding, self.user_service.get_user_snapshot(feeding.user_id)

    def get_user_feedings(self, user_id: str, limit: int = 10) -> List[Feeding]:
        """특정 사용자가 남긴 급식 기록을 최신순으로 조회합니다."""
        query = self.feedings_ref \
            .where(filter=FieldFilter('user_id', '==', user_id)) \
            .order_by('timestamp', direction=firestore.Query.DESCENDING) \
            .limit(limit)
        return [Feeding.from_dict(doc.to_dict()) for doc in query.stream()]
