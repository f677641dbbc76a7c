# waste_admin/conftest.py
"""
테스트 공용 픽스처.

실제 Firebase 없이 테스트할 수 있도록 서비스가 사용하는 Firestore 클라이언트의 일부
(collection / document / where / order_by / start_after / limit / stream)와
IdentityService를 메모리로 흉내 냅니다.
"""
import copy
import threading
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from firebase_admin import firestore

from waste_admin import create_app
from waste_admin.core.errors import AuthenticationError
from waste_admin.core.security import create_admin_tokens
from waste_admin.models.user import AdminSession


# --- Firestore 대역 ---

class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self):
        self._collection._check(self.id)
        return FakeSnapshot(self.id, self._collection.docs.get(self.id))

    def set(self, data, merge=False):
        self._collection._check(self.id)
        self._collection.docs[self.id] = copy.deepcopy(data)

    def delete(self):
        self._collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, after_id=None, limit_count=None):
        self._collection = collection
        self._filters = tuple(filters)
        self._order = order
        self._after_id = after_id
        self._limit = limit_count

    def _copy(self, **changes):
        state = dict(filters=self._filters, order=self._order, after_id=self._after_id, limit_count=self._limit)
        state.update(changes)
        return FakeQuery(self._collection, **state)

    def where(self, field, op, value):
        assert op == '==', "equality queries only"
        return self._copy(filters=self._filters + ((field, value),))

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return self._copy(order=(field, direction))

    def start_after(self, snapshot):
        return self._copy(after_id=snapshot.id)

    def limit(self, count):
        return self._copy(limit_count=count)

    def stream(self):
        self._collection._check(None)
        self._collection.query_count += 1
        items = [(doc_id, data) for doc_id, data in self._collection.docs.items()
                 if all(data.get(field) == value for field, value in self._filters)]
        if self._order:
            field, direction = self._order
            items.sort(key=lambda item: item[1].get(field), reverse=direction == firestore.Query.DESCENDING)
        if self._after_id is not None:
            ids = [doc_id for doc_id, _ in items]
            items = items[ids.index(self._after_id) + 1:]
        if self._limit is not None:
            items = items[:self._limit]
        return iter([FakeSnapshot(doc_id, copy.deepcopy(data)) for doc_id, data in items])

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):
    def __init__(self, name):
        super().__init__(self)
        self.name = name
        self.docs = {}
        self.failure = None          # 컬렉션 전체 실패
        self.failing_docs = {}       # 문서 단위 실패
        self.query_count = 0
        self.lookups = []
        self._lock = threading.Lock()

    def _check(self, doc_id):
        if doc_id is not None:
            with self._lock:
                self.lookups.append(doc_id)
            if doc_id in self.failing_docs:
                raise self.failing_docs[doc_id]
        if self.failure is not None:
            raise self.failure

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or uuid.uuid4().hex)


class FakeFirestore:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


# --- IdentityService 대역 ---

class FakeIdentityService:
    def __init__(self):
        self.accounts = {}       # email -> {uid, password, display_name}
        self.signed_in = set()   # 제공자 쪽 세션이 살아 있는 uid
        self.deleted = []
        self.revoked = []
        self.revoke_failure = None

    def add_account(self, email, password, display_name=None):
        uid = uuid.uuid4().hex[:20]
        self.accounts[email] = {"uid": uid, "password": password, "display_name": display_name}
        return uid

    def sign_in_with_password(self, email, password):
        account = self.accounts.get(email)
        if not account or account["password"] != password:
            raise AuthenticationError("이메일 또는 비밀번호가 올바르지 않습니다.")
        self.signed_in.add(account["uid"])
        return {"uid": account["uid"], "email": email, "display_name": account["display_name"],
                "id_token": "id-token", "refresh_token": "provider-refresh-token"}

    def create_user(self, email, password, display_name):
        if email in self.accounts:
            raise AuthenticationError("이미 가입된 이메일입니다.", "EMAIL_EXISTS")
        if len(password) < 6:
            raise AuthenticationError("비밀번호는 6자 이상이어야 합니다.", "INVALID_CREDENTIALS")
        return self.add_account(email, password, display_name)

    def delete_user(self, uid):
        self.deleted.append(uid)
        for email, account in list(self.accounts.items()):
            if account["uid"] == uid:
                del self.accounts[email]

    def revoke_refresh_tokens(self, uid):
        if self.revoke_failure is not None:
            raise self.revoke_failure
        self.revoked.append(uid)
        self.signed_in.discard(uid)


# --- 데이터 헬퍼 ---

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

WASTE_TYPES = {
    "00001": {"waste_type": "00001", "waste_name": "Organic Bin"},
    "00002": {"waste_type": "00002", "waste_name": "Recyclables Bin"},
    "00004": {"waste_type": "00004", "waste_name": "Hazardous Bin"},
}


def seed_waste_types(db, types=None):
    collection = db.collection('waste_type')
    for key, data in (types or WASTE_TYPES).items():
        collection.docs[key] = dict(data)


def seed_logs(db, count, keys=("00001", "00002", "00004")):
    """분 단위로 시간이 증가하는 로그를 만들고, 최신순으로 정렬된 문서 ID 목록을 반환합니다."""
    collection = db.collection('waste_management_id')
    ids = []
    for i in range(count):
        doc_id = f"log-{i:03d}"
        collection.docs[doc_id] = {
            "waste_type": keys[i % len(keys)],
            "timestamp": BASE_TIME + timedelta(minutes=i),
            "user_id": f"user-{i % 4}",
            "garbage_type_sensor": i % 2 == 0,
            "bin_id": f"BIN-{100 + i}",
        }
        ids.append(doc_id)
    return list(reversed(ids))


# --- 픽스처 ---

@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def identity():
    return FakeIdentityService()


@pytest.fixture
def app(db, identity):
    app = create_app('testing', db=db, identity_service=identity)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_account(db, identity):
    """허용 목록에 등록된 관리자 계정 (email, password, uid)"""
    email, password = "admin@waste.io", "admin-password"
    uid = identity.add_account(email, password, display_name="Admin")
    db.collection('admin_id').docs["admin-1"] = {"email": email}
    return email, password, uid


@pytest.fixture
def admin_headers(app, admin_account):
    email, _, uid = admin_account
    with app.app_context():
        tokens = create_admin_tokens(AdminSession(uid=uid, email=email))
    return {"Authorization": f"Bearer {tokens['access_token']}"}
