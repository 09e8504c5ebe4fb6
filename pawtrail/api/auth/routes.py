# pawtrail/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
    get_jwt,
)
from marshmallow import ValidationError

from .schemas import LoginSchema, AuthUserResponseSchema

auth_bp = Blueprint('auth_bp', __name__)

@auth_bp.route('/login', methods=['POST'])
def login():
    """사용자명으로 로그인합니다. 처음 보는 사용자명이면 자동으로 가입됩니다."""
    service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json(silent=True) or {})
        user = service.login(data['username'], data.get('display_name'))

        return jsonify({
            "access_token": create_access_token(identity=user.user_id),
            "refresh_token": create_refresh_token(identity=user.user_id),
            "user_info": AuthUserResponseSchema().dump(user),
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"Login API error: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)
    return jsonify(access_token=new_access_token), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required(verify_type=False)
def logout():
    """로그아웃. 요청에 사용된 토큰(access 또는 refresh)을 무효화 목록에 추가합니다."""
    service = current_app.services['auth']
    try:
        service.logout(get_jwt())
        return jsonify({"message": "로그아웃 되었습니다."}), 200
    except Exception as e:
        logging.error(f"Logout API error: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500


@auth_bp.route('/user', methods=['GET'])
@jwt_required()
def get_current_user():
    """현재 로그인한 사용자의 정보를 반환합니다."""
    user_id = get_jwt_identity()
    user = current_app.services['users'].get_user(user_id)
    if user is None:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
    return jsonify(AuthUserResponseSchema().dump(user)), 200
