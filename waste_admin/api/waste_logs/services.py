# waste_admin/api/waste_logs/services.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
from firebase_admin import firestore

from waste_admin.core.errors import NotFoundError, TransientFetchError
from waste_admin.models.waste_log import EnrichedLogRow, LogPage, LogRecord, ReferenceTypeEntry

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_MAX_WORKERS = 8

class WasteLogService:
    """
    폐기물 로그 조회 서비스.
    최신순 커서 페이지네이션과 waste_type 참조 컬렉션 조인(enrich)을 담당하며,
    로그 문서를 생성/수정/삭제하지 않습니다.
    """
    def __init__(self, db, page_size: int = DEFAULT_PAGE_SIZE, max_workers: int = DEFAULT_MAX_WORKERS,
                 logs_collection: str = 'waste_management_id', types_collection: str = 'waste_type'):
        self.db = db
        self.page_size = page_size
        self.max_workers = max_workers
        self.logs_ref = db.collection(logs_collection)
        self.types_ref = db.collection(types_collection)

    def fetch_page(self, cursor: Optional[str] = None) -> LogPage:
        """
        timestamp 내림차순으로 한 페이지를 조회합니다.

        :param cursor: 이전 페이지 마지막 문서의 ID. 주어지면 그 문서 바로 다음부터 조회합니다.
        :return: LogPage. has_more는 페이지가 꽉 찼는지 여부만으로 판단합니다.
        """
        if cursor and '/' in cursor:
            # 문서 ID에는 '/'가 들어갈 수 없습니다
            raise NotFoundError(f"커서 문서를 찾을 수 없습니다: {cursor}", "INVALID_CURSOR")

        query = self.logs_ref.order_by("timestamp", direction=firestore.Query.DESCENDING)
        try:
            if cursor:
                cursor_doc = self.logs_ref.document(cursor).get()
                if not cursor_doc.exists:
                    raise NotFoundError(f"커서 문서를 찾을 수 없습니다: {cursor}", "INVALID_CURSOR")
                query = query.start_after(cursor_doc)

            docs = list(query.limit(self.page_size).stream())
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"폐기물 로그 페이지 조회 실패 (cursor: {cursor}): {e}", exc_info=True)
            raise TransientFetchError("폐기물 로그를 불러오지 못했습니다.") from e

        records = [LogRecord.from_document(doc.id, doc.to_dict()) for doc in docs]
        next_cursor = docs[-1].id if docs else None
        logger.info(f"폐기물 로그 페이지 조회 완료: {len(records)}개 (cursor: {cursor})")
        return LogPage(records=records, next_cursor=next_cursor, has_more=len(records) == self.page_size)

    def lookup_waste_type(self, key: str) -> Optional[ReferenceTypeEntry]:
        """waste_type 참조 문서 하나를 조회합니다. 없으면 None."""
        doc = self.types_ref.document(key).get()
        if not doc.exists:
            return None
        return ReferenceTypeEntry.from_document(doc.id, doc.to_dict() or {})

    def _enrich_one(self, record: LogRecord) -> EnrichedLogRow:
        if not record.waste_type_key:
            logger.warning(f"waste_type이 비어 있는 로그입니다 (id: {record.id})")
            return EnrichedLogRow.from_record(record, None)
        try:
            entry = self.lookup_waste_type(record.waste_type_key)
        except Exception as e:
            logger.warning(f"waste_type 조회 실패, 기본값으로 대체 (key: {record.waste_type_key}): {e}")
            entry = None
        if entry is None:
            logger.debug(f"참조 데이터가 없는 waste_type (key: {record.waste_type_key})")
        return EnrichedLogRow.from_record(record, entry)

    def enrich(self, records: Sequence[LogRecord]) -> List[EnrichedLogRow]:
        """
        레코드마다 참조 컬렉션을 개별 조회하여 표시 이름을 붙입니다.
        조회는 스레드 풀에서 동시에 실행되고, 결과 순서는 입력 순서와 같습니다.
        조회 실패는 "unknown"으로 대체될 뿐 예외를 던지지 않습니다.
        """
        if not records:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(records))) as executor:
            return list(executor.map(self._enrich_one, records))


def search(term: Optional[str], rows: Sequence[EnrichedLogRow]) -> List[EnrichedLogRow]:
    """
    이미 조회된 행을 대소문자 구분 없이 부분 문자열로 필터링합니다. (재조회 없음)
    검색 대상: 폐기물 종류 라벨, 사용자 ID, 폐기물 이름, 통 ID, 상태
    """
    if term is None or term.strip() == "":
        return list(rows)

    needle = term.lower()

    def matches(row: EnrichedLogRow) -> bool:
        fields = (row.waste_type_label, row.user_id, row.waste_type_display_name, row.bin_id, row.status or "")
        return any(needle in (value or "").lower() for value in fields)

    return [row for row in rows if matches(row)]
