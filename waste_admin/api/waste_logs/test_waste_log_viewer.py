# waste_admin/api/waste_logs/test_waste_log_viewer.py
import threading

import pytest

from waste_admin.conftest import seed_logs, seed_waste_types
from waste_admin.core.errors import FetchInProgressError, TransientFetchError
from waste_admin.api.waste_logs.services import WasteLogService
from waste_admin.api.waste_logs.viewer import WasteLogViewer, ViewerRegistry


@pytest.fixture
def service(db):
    seed_waste_types(db)
    return WasteLogService(db, page_size=10, max_workers=4)

@pytest.fixture
def viewer(service):
    return WasteLogViewer(service)

def _ids(viewer):
    return [row.id for row in viewer.rows]


def test_load_shows_first_page(db, viewer):
    ordered_ids = seed_logs(db, 25)

    viewer.load()

    assert viewer.loaded is True
    assert viewer.page == 1
    assert _ids(viewer) == ordered_ids[:10]
    assert viewer.has_more is True
    assert viewer.can_go_back is False
    assert viewer.loading is False

def test_advance_then_retreat_restores_page_one(db, viewer):
    ordered_ids = seed_logs(db, 25)
    viewer.load()

    assert viewer.advance_page() is True
    assert viewer.page == 2
    assert _ids(viewer) == ordered_ids[10:20]

    assert viewer.retreat_page() is True
    assert viewer.page == 1
    assert _ids(viewer) == ordered_ids[:10]

def test_retreat_returns_to_the_immediately_previous_page(db, viewer):
    ordered_ids = seed_logs(db, 25)
    viewer.load()
    viewer.advance_page()
    viewer.advance_page()
    assert viewer.page == 3
    assert _ids(viewer) == ordered_ids[20:]
    assert viewer.has_more is False

    viewer.retreat_page()

    assert viewer.page == 2
    assert _ids(viewer) == ordered_ids[10:20]
    assert viewer.has_more is True

def test_advance_is_noop_without_more(db, viewer):
    seed_logs(db, 4)
    viewer.load()
    rows = list(viewer.rows)

    assert viewer.has_more is False
    assert viewer.advance_page() is False
    assert viewer.page == 1
    assert viewer.rows == rows

def test_retreat_is_noop_on_first_page(db, viewer):
    seed_logs(db, 4)
    viewer.load()
    queries = db.collection('waste_management_id').query_count

    assert viewer.retreat_page() is False
    assert db.collection('waste_management_id').query_count == queries

def test_advance_onto_empty_page_keeps_current_rows(db, viewer):
    ordered_ids = seed_logs(db, 10)
    viewer.load()
    assert viewer.has_more is True

    assert viewer.advance_page() is False

    assert viewer.page == 1
    assert viewer.has_more is False
    assert _ids(viewer) == ordered_ids

def test_failed_fetch_leaves_state_unchanged(db, viewer):
    ordered_ids = seed_logs(db, 25)
    viewer.load()
    db.collection('waste_management_id').failure = RuntimeError("unavailable")

    with pytest.raises(TransientFetchError):
        viewer.advance_page()

    assert viewer.page == 1
    assert _ids(viewer) == ordered_ids[:10]
    assert viewer.loading is False
    assert viewer.cursor_stack == []

def test_fetch_while_another_is_in_flight_is_rejected(db, viewer):
    seed_logs(db, 25)
    viewer.load()
    viewer._fetch_lock.acquire()
    try:
        with pytest.raises(FetchInProgressError):
            viewer.advance_page()
    finally:
        viewer._fetch_lock.release()

    assert viewer.page == 1
    assert viewer.advance_page() is True


class PausingViewer(WasteLogViewer):
    """조회 결과를 받은 뒤 상태에 반영하기 직전에 멈추는 뷰어"""

    def __init__(self, service):
        super().__init__(service)
        self.fetched = threading.Event()
        self.resume = threading.Event()

    def _apply(self, page, rows):
        if self.page > 1:
            self.fetched.set()
            self.resume.wait(timeout=5)
        super()._apply(page, rows)

def test_request_between_fetch_and_apply_is_rejected(db, service):
    ordered_ids = seed_logs(db, 35)
    viewer = PausingViewer(service)
    viewer.load()

    worker = threading.Thread(target=viewer.advance_page)
    worker.start()
    try:
        assert viewer.fetched.wait(timeout=5)
        assert viewer.loading is True

        with pytest.raises(FetchInProgressError):
            viewer.advance_page()
        with pytest.raises(FetchInProgressError):
            viewer.retreat_page()
        with pytest.raises(FetchInProgressError):
            viewer.load()
    finally:
        viewer.resume.set()
        worker.join(timeout=5)

    assert viewer.page == 2
    assert _ids(viewer) == ordered_ids[10:20]
    assert viewer.cursor_stack == [None]
    assert viewer.page_cursor == ordered_ids[9]
    assert viewer.loading is False

    assert viewer.advance_page() is True
    assert viewer.page == 3
    assert _ids(viewer) == ordered_ids[20:30]


def test_search_term_filters_without_requery(db, viewer):
    seed_logs(db, 10)
    viewer.load()
    queries = db.collection('waste_management_id').query_count

    viewer.set_search_term("HAZARDOUS")

    assert viewer.visible_rows
    assert all(row.waste_type_label == "Hazardous" for row in viewer.visible_rows)
    assert db.collection('waste_management_id').query_count == queries

    viewer.set_search_term("")
    assert viewer.visible_rows == viewer.rows

def test_registry_keeps_one_viewer_per_admin(service):
    registry = ViewerRegistry(service)

    first = registry.get("admin-a")
    assert registry.get("admin-a") is first
    assert registry.get("admin-b") is not first

    registry.discard("admin-a")
    assert registry.get("admin-a") is not first
