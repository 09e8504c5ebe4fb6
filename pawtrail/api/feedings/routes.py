# pawtrail/api/feedings/routes.py
import logging
from dataclasses import asdict
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from .schemas import (
    FeedingCreateSchema,
    FeedingUpdateSchema,
    FeedingListQuerySchema,
    FeedingResponseSchema,
    LastFeedingResponseSchema
)

feedings_bp = Blueprint('feedings_bp', __name__)

@feedings_bp.route('', methods=['POST'])
@jwt_required()
def create_feeding():
    """급식 기록 생성 API."""
    user_id = get_jwt_identity()
    service = current_app.services['feedings']
    try:
        data = FeedingCreateSchema().load(request.get_json(silent=True) or {})
        feeding = service.create_feeding(user_id, data)
        return jsonify(FeedingResponseSchema().dump(feeding)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Feeding creation API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FEEDING_CREATION_FAILED", "message": "급식 기록 중 오류가 발생했습니다."}), 500

@feedings_bp.route('', methods=['GET'])
@jwt_required()
def list_my_feedings():
    """내가 남긴 급식 기록을 최신순으로 조회합니다."""
    user_id = get_jwt_identity()
    service = current_app.services['feedings']
    try:
        params = FeedingListQuerySchema().load(request.args)
        feedings = service.get_user_feedings(user_id, params['limit'])
        return jsonify(FeedingResponseSchema(many=True).dump(feedings)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Feeding list API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "급식 기록 조회 중 오류가 발생했습니다."}), 500

@feedings_bp.route('/last', methods=['GET'])
@jwt_required()
def get_last_feeding():
    """가족 전체에서 가장 최근 급식 기록을 조회합니다. 없으면 null."""
    service = current_app.services['feedings']
    try:
        result = service.get_last_feeding()
        if result is None:
            return jsonify(None), 200
        feeding, user = result
        payload = asdict(feeding)
        payload['user'] = user
        return jsonify(LastFeedingResponseSchema().dump(payload)), 200
    except Exception as e:
        logging.error(f"Last feeding API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "최근 급식 기록 조회 중 오류가 발생했습니다."}), 500

@feedings_bp.route('/<string:feeding_id>', methods=['PUT'])
@jwt_required()
def update_feeding(feeding_id: str):
    """
    급식 기록 수정 API.
    meal_type, portion, notes, timestamp 만 반영되며 그 외 필드는 무시됩니다.
    """
    user_id = get_jwt_identity()
    service = current_app.services['feedings']
    try:
        data = FeedingUpdateSchema(partial=True).load(request.get_json(silent=True) or {})
        feeding = service.update_feeding(feeding_id, data, user_id=user_id)
        return jsonify(FeedingResponseSchema().dump(feeding)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "NO_VALID_FIELDS", "message": str(e)}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "FEEDING_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Update feeding API error (feeding_id: {feeding_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "급식 기록 수정 중 오류가 발생했습니다."}), 500

@feedings_bp.route('/<string:feeding_id>', methods=['DELETE'])
@jwt_required()
def delete_feeding(feeding_id: str):
    """급식 기록 삭제 API."""
    user_id = get_jwt_identity()
    service = current_app.services['feedings']
    try:
        service.delete_feeding(feeding_id, user_id=user_id)
        return '', 204
    except FileNotFoundError as e:
        return jsonify({"error_code": "FEEDING_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Delete feeding API error (feeding_id: {feeding_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "급식 기록 삭제 중 오류가 발생했습니다."}), 500
