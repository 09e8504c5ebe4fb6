# pawtrail/api/dogs/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Dict, Any, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from pawtrail.api.users.services import UserService
from pawtrail.models.dog import Dog
from pawtrail.services.firestore_service import first_document
from pawtrail.utils.datetime_utils import DateTimeUtils

class DogService:
    """반려견 프로필 관리를 전담하는 서비스."""
    def __init__(self, db, user_service: UserService):
        self.db = db
        self.dogs_ref = self.db.collection('dogs')
        self.user_service = user_service
        logging.info("DogService initialized.")

    def get_active_dog(self, user_id: str) -> Optional[Dog]:
        """사용자의 활성 반려견(is_active=True 중 가장 최근 생성) 프로필을 반환합니다."""
        #  중요: (user_id, is_active, created_at) 복합 색인이 필요합니다.
        query = self.dogs_ref \
            .where(filter=FieldFilter('user_id', '==', user_id)) \
            .where(filter=FieldFilter('is_active', '==', True)) \
            .order_by('created_at', direction=firestore.Query.DESCENDING)
        data = first_document(query)
        return Dog.from_dict(data) if data else None

    def get_dog(self, dog_id: str) -> Dog:
        doc = self.dogs_ref.document(dog_id).get()
        if not doc.exists:
            raise FileNotFoundError(f"해당 ID의 반려견을 찾을 수 없습니다: {dog_id}")
        return Dog.from_dict(doc.to_dict())

    def create_dog(self, user_id: str, dog_data: Dict[str, Any]) -> Dog:
        """반려견 프로필을 생성합니다. 사용자 문서가 없으면 먼저 만들어 둡니다."""
        self.user_service.upsert_user(user_id)

        new_dog = Dog(dog_id=str(uuid.uuid4()), user_id=user_id, **dog_data)
        self.dogs_ref.document(new_dog.dog_id).set(DateTimeUtils.for_firestore(asdict(new_dog)))
        logging.info(f"Dog profile {new_dog.dog_id} created for user {user_id}")
        return new_dog

    def update_dog(self, dog_id: str, user_id: str, update_data: Dict[str, Any]) -> Dog:
        """
        [소유자 전용] 반려견 프로필을 부분 업데이트합니다.
        is_active=False 로 비활성화할 수 있으며 문서를 물리적으로 삭제하지는 않습니다.
        """
        dog = self.get_dog(dog_id)
        if dog.user_id != user_id:
            raise PermissionError("반려견 프로필을 수정할 권한이 없습니다.")
        if not update_data:
            raise ValueError("수정할 데이터가 제공되지 않았습니다.")

        updates = dict(update_data)
        updates['updated_at'] = DateTimeUtils.now()
        self.dogs_ref.document(dog_id).update(DateTimeUtils.for_firestore(updates))
        logging.info(f"Dog profile {dog_id} updated with fields: {list(update_data.keys())}")
        return self.get_dog(dog_id)
