# waste_admin/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from waste_admin.utils.datetime_utils import DateTimeUtils

@dataclass
class UserProfile:
    """
    Firestore 'user_id' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID는 Firebase Authentication의 uid와 같습니다.
    """
    firebase_uid: str
    email: str
    name: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
    user_point: int = 0
    department_id: str = ""

    def to_document(self) -> Dict[str, Any]:
        # 모바일 앱이 쓰는 기존 필드명(createdAt, update_at)을 그대로 유지합니다.
        return {
            "name": self.name,
            "email": self.email,
            "firebase_uid": self.firebase_uid,
            "createdAt": self.created_at,
            "update_at": self.updated_at,
            "user_point": self.user_point,
            "department_id": self.department_id,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "UserProfile":
        data = DateTimeUtils.from_firestore(data)
        return cls(
            firebase_uid=data.get("firebase_uid") or doc_id,
            email=data.get("email", ""),
            name=data.get("name", ""),
            created_at=DateTimeUtils.coerce_timestamp(data.get("createdAt")),
            updated_at=DateTimeUtils.coerce_timestamp(data.get("update_at")),
            user_point=int(data.get("user_point") or 0),
            department_id=data.get("department_id") or "",
        )

@dataclass
class AdminSession:
    """관리자 로그인 성공 시 반환되는 세션 정보."""
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
