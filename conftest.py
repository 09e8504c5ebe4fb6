# conftest.py
"""
테스트 공통 픽스처.

실제 Firestore 대신 메모리 기반 FakeFirestore 를 create_app 에 주입합니다.
서비스 코드가 사용하는 범위(문서 CRUD, 하위 컬렉션, FieldFilter 쿼리, order_by, limit, WriteBatch, update_time 전제 조건)만 흉내냅니다.
"""
import copy
import itertools
import operator

import pytest
from google.api_core.exceptions import AlreadyExists, FailedPrecondition, NotFound

from pawtrail import create_app

_OPERATORS = {
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    'in': lambda value, options: value in options,
    'array_contains': lambda value, item: isinstance(value, list) and item in value,
}

_MISSING = object()


class FakeDocumentSnapshot:
    def __init__(self, reference, data, update_time=None):
        self.reference = reference
        self.id = reference.id
        self._data = data
        self.update_time = update_time

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, client, path):
        self._client = client
        self._path = path
        self.id = path[-1]

    @property
    def path(self):
        return '/'.join(self._path)

    def collection(self, name):
        return FakeCollectionReference(self._client, self._path + (name,))

    def get(self):
        return FakeDocumentSnapshot(self, self._client._store.get(self._path),
                                    self._client._update_times.get(self._path))

    def create(self, data):
        if self._path in self._client._store:
            raise AlreadyExists(f"Document already exists: {self.path}")
        self._client._write(self._path, copy.deepcopy(data))

    def set(self, data, merge=False):
        if merge and self._path in self._client._store:
            merged = dict(self._client._store[self._path], **copy.deepcopy(data))
            self._client._write(self._path, merged)
        else:
            self._client._write(self._path, copy.deepcopy(data))

    def update(self, data):
        if self._path not in self._client._store:
            raise NotFound(f"No document to update: {self.path}")
        self._client._write(self._path, dict(self._client._store[self._path], **copy.deepcopy(data)))

    def delete(self, option=None):
        self._client._check_option(self, option)
        self._client._store.pop(self._path, None)
        self._client._update_times.pop(self._path, None)


class FakeQuery:
    def __init__(self, client, path, filters=(), orders=(), limit_count=None):
        self._client = client
        self._path = path
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit_count

    def _copy(self, **kwargs):
        params = dict(filters=self._filters, orders=self._orders, limit_count=self._limit)
        params.update(kwargs)
        return FakeQuery(self._client, self._path, **params)

    def where(self, field_path=None, op_string=None, value=None, *, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction='ASCENDING'):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count):
        return self._copy(limit_count=count)

    def _matches(self, data):
        for field_path, op_string, value in self._filters:
            current = data.get(field_path, _MISSING)
            if current is _MISSING or not _OPERATORS[op_string](current, value):
                return False
        return True

    def stream(self):
        depth = len(self._path) + 1
        rows = [
            (path, data) for path, data in sorted(self._client._store.items())
            if len(path) == depth and path[:-1] == self._path and self._matches(data)
        ]
        # order_by 대상 필드가 없는 문서는 결과에서 제외됩니다.
        for field_path, direction in reversed(self._orders):
            rows = [row for row in rows if row[1].get(field_path) is not None]
            rows.sort(key=lambda row: row[1][field_path], reverse=(direction == 'DESCENDING'))
        if self._limit is not None:
            rows = rows[:self._limit]
        return iter([
            FakeDocumentSnapshot(FakeDocumentReference(self._client, path), copy.deepcopy(data))
            for path, data in rows
        ])

    def get(self):
        return list(self.stream())


class FakeCollectionReference(FakeQuery):
    _ids = itertools.count(1)

    def __init__(self, client, path):
        super().__init__(client, path)
        self.id = path[-1]

    def document(self, document_id=None):
        if document_id is None:
            document_id = f"auto-{next(self._ids)}"
        return FakeDocumentReference(self._client, self._path + (document_id,))


class FakeWriteBatch:
    """커밋 시점에 전체를 검증한 뒤 한 번에 적용합니다. 하나라도 실패하면 아무것도 쓰지 않습니다."""
    def __init__(self, client):
        self._client = client
        self._ops = []

    def create(self, reference, data):
        self._ops.append(('create', reference, data))

    def set(self, reference, data, merge=False):
        self._ops.append(('set', reference, data, merge))

    def update(self, reference, data):
        self._ops.append(('update', reference, data))

    def delete(self, reference, option=None):
        self._ops.append(('delete', reference, option))

    def commit(self):
        store = self._client._store
        for op in self._ops:
            kind, reference = op[0], op[1]
            if kind == 'create' and reference._path in store:
                raise AlreadyExists(f"Document already exists: {reference.path}")
            if kind == 'update' and reference._path not in store:
                raise NotFound(f"No document to update: {reference.path}")
            if kind == 'delete':
                self._client._check_option(reference, op[2])
        for op in self._ops:
            kind, reference = op[0], op[1]
            if kind == 'create':
                reference.create(op[2])
            elif kind == 'set':
                reference.set(op[2], merge=op[3])
            elif kind == 'update':
                reference.update(op[2])
            elif kind == 'delete':
                reference.delete()
        self._ops = []


class FakeLastUpdateOption:
    def __init__(self, last_update_time):
        self.last_update_time = last_update_time


class FakeFirestore:
    def __init__(self):
        self._store = {}
        self._update_times = {}
        self._clock = itertools.count(1)

    def _write(self, path, data):
        self._store[path] = data
        self._update_times[path] = next(self._clock)

    def _check_option(self, reference, option):
        # 문서가 없거나 마지막 수정 시각이 다르면 전제 조건 실패
        if option is not None and self._update_times.get(reference._path) != option.last_update_time:
            raise FailedPrecondition(f"Document was modified or deleted: {reference.path}")

    def write_option(self, last_update_time=None):
        return FakeLastUpdateOption(last_update_time)

    def collection(self, name):
        return FakeCollectionReference(self, (name,))

    def batch(self):
        return FakeWriteBatch(self)


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def app(db):
    app = create_app('testing', db=db)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    """사용자명으로 로그인하고 Authorization 헤더를 돌려주는 팩토리."""
    def _login(username='mom', display_name=None):
        payload = {'username': username}
        if display_name:
            payload['display_name'] = display_name
        response = client.post('/api/auth/login', json=payload)
        assert response.status_code == 200
        return {'Authorization': f"Bearer {response.get_json()['access_token']}"}
    return _login
