# pawtrail/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from .schemas import UserCreateSchema, UserResponseSchema

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('', methods=['POST'])
def create_user():
    """사용자명으로 신규 사용자를 생성합니다."""
    service = current_app.services['users']
    try:
        data = UserCreateSchema().load(request.get_json(silent=True) or {})
        user = service.create_user(data['username'], data.get('display_name'))
        return jsonify({"user": UserResponseSchema().dump(user)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except FileExistsError as e:
        return jsonify({"error_code": "USER_ALREADY_EXISTS", "message": str(e)}), 409
    except Exception as e:
        logging.error(f"User creation API error: {e}", exc_info=True)
        return jsonify({"error_code": "USER_CREATION_FAILED", "message": "사용자 생성 중 오류가 발생했습니다."}), 500

@users_bp.route('/<string:username>', methods=['GET'])
def check_user_exists(username: str):
    """사용자명이 이미 등록되어 있는지 확인합니다."""
    service = current_app.services['users']
    try:
        user_id = service.normalize_username(username)
        if service.user_exists(user_id):
            return jsonify({"exists": True}), 200
        return jsonify({"exists": False}), 404
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"User lookup API error (username: {username}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "사용자 조회 중 오류가 발생했습니다."}), 500
