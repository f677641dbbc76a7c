# waste_admin/api/waste_logs/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from waste_admin.core.security import admin_required
from .schemas import WasteLogQuerySchema, SearchTermSchema, WasteLogPageSchema, ViewerSnapshotSchema
from .services import search

logger = logging.getLogger(__name__)

waste_logs_bp = Blueprint('waste_logs_bp', __name__)

def _current_viewer():
    return current_app.services['waste_log_viewers'].get(get_jwt_identity())

def _snapshot(viewer):
    return jsonify(ViewerSnapshotSchema().dump(viewer)), 200


@waste_logs_bp.route('', methods=['GET'])
@admin_required
def list_waste_logs():
    """
    커서 기반으로 한 페이지를 조회합니다. (상태 없는 조회)

    Query Parameters:
        - cursor (str, optional): 이전 응답의 next_cursor
        - q (str, optional): 조회된 페이지 안에서 적용할 검색어
    """
    try:
        params = WasteLogQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    service = current_app.services['waste_logs']
    page = service.fetch_page(params['cursor'])
    rows = service.enrich(page.records)

    result = {
        'logs': search(params['q'], rows),
        'total_fetched': len(rows),
        'next_cursor': page.next_cursor,
        'has_more': page.has_more,
        'page_size': service.page_size,
    }
    return jsonify(WasteLogPageSchema().dump(result)), 200


# --- 관리자별 뷰어 (페이지 이동 상태를 서버에서 유지) ---

@waste_logs_bp.route('/viewer', methods=['GET'])
@admin_required
def get_viewer():
    """현재 뷰어 상태를 반환합니다. 아직 불러온 적이 없으면 첫 페이지를 조회합니다."""
    viewer = _current_viewer()
    if not viewer.loaded:
        viewer.load()
    return _snapshot(viewer)


@waste_logs_bp.route('/viewer/reload', methods=['POST'])
@admin_required
def reload_viewer():
    viewer = _current_viewer()
    viewer.load()
    return _snapshot(viewer)


@waste_logs_bp.route('/viewer/next', methods=['POST'])
@admin_required
def next_page():
    viewer = _current_viewer()
    if not viewer.loaded:
        viewer.load()
    moved = viewer.advance_page()
    logger.info(f"다음 페이지 요청 (page: {viewer.page}, moved: {moved})")
    return _snapshot(viewer)


@waste_logs_bp.route('/viewer/prev', methods=['POST'])
@admin_required
def prev_page():
    viewer = _current_viewer()
    moved = viewer.retreat_page()
    logger.info(f"이전 페이지 요청 (page: {viewer.page}, moved: {moved})")
    return _snapshot(viewer)


@waste_logs_bp.route('/viewer/search', methods=['PUT'])
@admin_required
def set_search_term():
    try:
        data = SearchTermSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    viewer = _current_viewer()
    viewer.set_search_term(data['term'])
    return _snapshot(viewer)
