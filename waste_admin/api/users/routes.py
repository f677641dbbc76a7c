# waste_admin/api/users/routes.py
from flask import Blueprint, jsonify, current_app

from waste_admin.core.security import admin_required
from waste_admin.api.users.schemas import UserProfileSchema

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('/<string:user_id>', methods=['GET'])
@admin_required
def get_user_profile(user_id: str):
    """특정 사용자의 프로필 문서를 조회합니다. 없으면 404 (USER_NOT_FOUND)."""
    profile = current_app.services['auth'].get_user_profile(user_id)
    return jsonify(UserProfileSchema().dump(profile)), 200
