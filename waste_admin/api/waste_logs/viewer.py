# waste_admin/api/waste_logs/viewer.py
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from waste_admin.core.errors import FetchInProgressError
from waste_admin.models.waste_log import EnrichedLogRow, LogPage
from .services import WasteLogService, search

logger = logging.getLogger(__name__)

class WasteLogViewer:
    """
    관리자 한 명의 로그 뷰어 상태(현재 페이지, 커서 스택, 검색어)를 관리합니다.

    - 앞으로 이동할 때마다 현재 페이지의 시작 커서를 스택에 쌓고,
      뒤로 이동할 때 꺼내어 이전 페이지를 정확히 다시 조회합니다.
    - 조회가 진행 중일 때 들어온 조회 요청은 FetchInProgressError로 거절합니다.
    - 조회가 실패하면 기존 상태를 그대로 유지합니다.
    """
    def __init__(self, service: WasteLogService):
        self.service = service
        self.page = 1
        self.page_cursor: Optional[str] = None   # 현재 페이지의 시작 커서 (1페이지는 None)
        self.cursor_stack: List[Optional[str]] = []
        self.next_cursor: Optional[str] = None
        self.has_more = True
        self.loading = False
        self.loaded = False
        self.rows: List[EnrichedLogRow] = []
        self.search_term = ""
        self._fetch_lock = threading.Lock()

    @property
    def visible_rows(self) -> List[EnrichedLogRow]:
        return search(self.search_term, self.rows)

    @property
    def can_go_back(self) -> bool:
        return self.page >= 2

    @contextmanager
    def _fetch_guard(self):
        """조회 1건이 커서 읽기부터 상태 반영까지 끝날 때까지 다른 조회를 거절합니다."""
        if not self._fetch_lock.acquire(blocking=False):
            raise FetchInProgressError("이전 조회가 아직 진행 중입니다.")
        self.loading = True
        try:
            yield
        finally:
            self.loading = False
            self._fetch_lock.release()

    def _fetch(self, cursor: Optional[str]) -> Tuple[LogPage, List[EnrichedLogRow]]:
        page = self.service.fetch_page(cursor)
        return page, self.service.enrich(page.records)

    def _apply(self, page: LogPage, rows: List[EnrichedLogRow]):
        self.rows = rows
        self.next_cursor = page.next_cursor
        self.has_more = page.has_more
        self.loaded = True

    def load(self):
        """첫 페이지를 (다시) 불러오고 커서 스택을 초기화합니다."""
        with self._fetch_guard():
            page, rows = self._fetch(None)
            self.page = 1
            self.page_cursor = None
            self.cursor_stack = []
            self._apply(page, rows)

    def advance_page(self) -> bool:
        """다음 페이지로 이동합니다. 더 가져올 데이터가 없으면 아무것도 하지 않습니다."""
        with self._fetch_guard():
            if not self.has_more or self.next_cursor is None:
                return False

            start_cursor = self.next_cursor
            page, rows = self._fetch(start_cursor)
            if not page.records:
                # 직전 페이지가 마지막이었지만 정확히 꽉 차 있던 경우
                logger.info(f"다음 페이지가 비어 있습니다 (page: {self.page})")
                self.has_more = False
                return False

            self.cursor_stack.append(self.page_cursor)
            self.page_cursor = start_cursor
            self.page += 1
            self._apply(page, rows)
            return True

    def retreat_page(self) -> bool:
        """이전 페이지로 이동합니다. 2페이지 이상에서만 동작합니다."""
        with self._fetch_guard():
            if not self.can_go_back:
                return False

            previous_cursor = self.cursor_stack[-1]
            page, rows = self._fetch(previous_cursor)
            self.cursor_stack.pop()
            self.page_cursor = previous_cursor
            self.page -= 1
            self._apply(page, rows)
            return True

    def set_search_term(self, term: Optional[str]):
        """검색어만 바꿉니다. 이미 불러온 행에서 필터링하므로 재조회하지 않습니다."""
        self.search_term = term or ""


class ViewerRegistry:
    """관리자별 WasteLogViewer 인스턴스를 보관합니다."""

    def __init__(self, service: WasteLogService):
        self.service = service
        self._viewers: Dict[str, WasteLogViewer] = {}
        self._lock = threading.Lock()

    def get(self, admin_id: str) -> WasteLogViewer:
        with self._lock:
            viewer = self._viewers.get(admin_id)
            if viewer is None:
                viewer = WasteLogViewer(self.service)
                self._viewers[admin_id] = viewer
            return viewer

    def discard(self, admin_id: str):
        with self._lock:
            self._viewers.pop(admin_id, None)
