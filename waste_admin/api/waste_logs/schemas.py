# waste_admin/api/waste_logs/schemas.py
from marshmallow import Schema, fields, validate

from waste_admin.utils.datetime_utils import DateTimeUtils
from .presentation import classify_status, disposal_label

# --- 요청 스키마 ---

class WasteLogQuerySchema(Schema):
    """GET /api/waste-logs 쿼리 파라미터"""
    cursor = fields.Str(load_default=None, validate=validate.Length(min=1, max=1500))
    q = fields.Str(load_default="")

class SearchTermSchema(Schema):
    """PUT /api/waste-logs/viewer/search 요청 본문"""
    term = fields.Str(required=True, validate=validate.Length(max=200))

# --- 응답 스키마 ---

class StatusBadgeSchema(Schema):
    variant = fields.Str()
    label = fields.Str()

class WasteLogRowSchema(Schema):
    """로그 표의 한 행. 원본 필드와 참조 데이터 조인 결과, 표시용 값을 함께 내려줍니다."""
    id = fields.Str(required=True)
    timestamp = fields.DateTime(required=True)
    formatted_timestamp = fields.Method("get_formatted_timestamp")
    waste_type_key = fields.Str()
    waste_type_code = fields.Str()
    waste_type_label = fields.Str()
    waste_type_display_name = fields.Str()
    user_id = fields.Str()
    bin_id = fields.Str()
    sorted_correctly = fields.Bool()
    disposal_label = fields.Method("get_disposal_label")
    status = fields.Str(allow_none=True)
    status_badge = fields.Method("get_status_badge")

    def get_formatted_timestamp(self, row):
        return DateTimeUtils.to_display_string(row.timestamp)

    def get_disposal_label(self, row):
        return disposal_label(row.sorted_correctly)

    def get_status_badge(self, row):
        return StatusBadgeSchema().dump(classify_status(row.status))

class WasteLogPageSchema(Schema):
    """GET /api/waste-logs 응답"""
    logs = fields.List(fields.Nested(WasteLogRowSchema))
    total_fetched = fields.Int()
    next_cursor = fields.Str(allow_none=True)
    has_more = fields.Bool()
    page_size = fields.Int()

class ViewerSnapshotSchema(Schema):
    """뷰어 상태 응답: 현재 페이지, 이동 가능 여부, 검색어가 적용된 행 목록"""
    page = fields.Int()
    has_more = fields.Bool()
    can_go_back = fields.Bool()
    loading = fields.Bool()
    search_term = fields.Str()
    total_loaded = fields.Function(lambda viewer: len(viewer.rows))
    logs = fields.List(fields.Nested(WasteLogRowSchema), attribute="visible_rows")
