# waste_admin/models/waste_log.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from waste_admin.utils.datetime_utils import DateTimeUtils

# 참조 컬렉션의 waste_type 코드 -> 사람이 읽는 라벨
WASTE_TYPE_LABELS: Dict[str, str] = {
    "00001": "Organic",
    "00002": "Recyclable",
    "00003": "General",
    "00004": "Hazardous",
    "00005": "Recycled",
    "00006": "Incinerated",
    "00007": "Landfilled",
}

UNKNOWN_WASTE_NAME = "unknown"
UNASSIGNED_BIN = "unassigned"


def waste_type_label(code: str) -> str:
    """정적 라벨 표에 없는 코드는 코드 그대로 표시합니다."""
    return WASTE_TYPE_LABELS.get(code, code)


@dataclass
class LogRecord:
    """
    Firestore 'waste_management_id' 컬렉션의 문서 하나.
    외부 수집 경로가 생성하며, 대시보드는 읽기만 합니다.
    """
    id: str
    waste_type_key: str
    timestamp: datetime
    user_id: str = ""
    sorted_correctly: bool = False
    bin_id: str = UNASSIGNED_BIN
    status: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "LogRecord":
        data = data or {}
        status = data.get("status")
        return cls(
            id=doc_id,
            waste_type_key=str(data.get("waste_type") or ""),
            timestamp=DateTimeUtils.coerce_timestamp(data.get("timestamp")),
            user_id=str(data.get("user_id") or ""),
            sorted_correctly=bool(data.get("garbage_type_sensor", False)),
            bin_id=str(data.get("bin_id") or UNASSIGNED_BIN),
            status=str(status) if status is not None else None,
        )


@dataclass
class ReferenceTypeEntry:
    """Firestore 'waste_type' 컬렉션 문서. 문서 ID가 로그의 waste_type 키입니다."""
    key: str
    display_code: str
    display_name: str

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "ReferenceTypeEntry":
        return cls(
            key=doc_id,
            display_code=str(data.get("waste_type") or doc_id),
            display_name=str(data.get("waste_name") or UNKNOWN_WASTE_NAME),
        )


@dataclass
class EnrichedLogRow:
    """LogRecord와 ReferenceTypeEntry를 조인한 뷰어의 한 행."""
    id: str
    waste_type_key: str
    timestamp: datetime
    user_id: str
    sorted_correctly: bool
    bin_id: str
    status: Optional[str]
    waste_type_code: str
    waste_type_display_name: str

    @property
    def waste_type_label(self) -> str:
        return waste_type_label(self.waste_type_code)

    @classmethod
    def from_record(cls, record: LogRecord, entry: Optional[ReferenceTypeEntry]) -> "EnrichedLogRow":
        return cls(
            id=record.id,
            waste_type_key=record.waste_type_key,
            timestamp=record.timestamp,
            user_id=record.user_id,
            sorted_correctly=record.sorted_correctly,
            bin_id=record.bin_id,
            status=record.status,
            waste_type_code=entry.display_code if entry else record.waste_type_key,
            waste_type_display_name=entry.display_name if entry else UNKNOWN_WASTE_NAME,
        )


@dataclass
class LogPage:
    """한 번의 페이지 조회 결과."""
    records: List[LogRecord]
    next_cursor: Optional[str]
    has_more: bool
