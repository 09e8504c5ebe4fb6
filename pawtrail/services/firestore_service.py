# pawtrail/services/firestore_service.py
import logging
from typing import Any, Dict, Optional

from pawtrail.utils.datetime_utils import DateTimeUtils

# Firestore WriteBatch 한 번에 담을 수 있는 최대 쓰기 수
MAX_BATCH_SIZE = 500

def delete_collection(db, collection_ref, batch_size: int = MAX_BATCH_SIZE) -> int:
    """
    컬렉션(또는 하위 컬렉션)의 모든 문서를 batch 단위로 삭제하고 삭제된 문서 수를 반환합니다.
    Firestore는 상위 문서를 지워도 하위 컬렉션이 남기 때문에 명시적으로 지워야 합니다.

    :param db: Firestore 클라이언트
    :param collection_ref: 비울 컬렉션 참조
    :param batch_size: 한 번에 삭제할 문서 수
    """
    deleted = 0
    try:
        while True:
            docs = list(collection_ref.limit(batch_size).stream())
            if not docs:
                break
            batch = db.batch()
            for doc in docs:
                batch.delete(doc.reference)
            batch.commit()
            deleted += len(docs)
            if len(docs) < batch_size:
                break
        return deleted
    except Exception as e:
        logging.error(f"Collection delete failed after {deleted} documents: {e}", exc_info=True)
        raise

def first_document(query) -> Optional[Dict[str, Any]]:
    """쿼리 결과의 첫 문서를 datetime 정규화된 딕셔너리로 반환합니다. 없으면 None."""
    doc = next(iter(query.limit(1).stream()), None)
    if doc is None:
        return None
    return DateTimeUtils.from_firestore(doc.to_dict())
