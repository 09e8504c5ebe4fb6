# pawtrail/api/dogs/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from .schemas import DogCreateSchema, DogUpdateSchema, DogProfileResponseSchema

dogs_bp = Blueprint('dogs_bp', __name__)

@dogs_bp.route('/profile', methods=['GET'])
@jwt_required()
def get_dog_profile():
    """내 활성 반려견 프로필을 조회합니다. 없으면 null."""
    user_id = get_jwt_identity()
    service = current_app.services['dogs']
    try:
        dog = service.get_active_dog(user_id)
        return jsonify(DogProfileResponseSchema().dump(dog) if dog else None), 200
    except Exception as e:
        logging.error(f"Get dog profile API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500

@dogs_bp.route('', methods=['POST'])
@jwt_required()
def create_dog():
    """반려견 프로필 등록 API."""
    user_id = get_jwt_identity()
    service = current_app.services['dogs']
    try:
        data = DogCreateSchema().load(request.get_json(silent=True) or {})
        dog = service.create_dog(user_id, data)
        return jsonify(DogProfileResponseSchema().dump(dog)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Dog creation API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DOG_CREATION_FAILED", "message": "프로필 등록 중 오류가 발생했습니다."}), 500

@dogs_bp.route('/<string:dog_id>', methods=['PUT'])
@jwt_required()
def update_dog(dog_id: str):
    """[소유자 전용] 반려견 프로필 수정 API (부분 업데이트)."""
    user_id = get_jwt_identity()
    service = current_app.services['dogs']
    try:
        update_data = DogUpdateSchema().load(request.get_json(silent=True) or {})
        dog = service.update_dog(dog_id, user_id, update_data)
        return jsonify(DogProfileResponseSchema().dump(dog)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "NO_DATA", "message": str(e)}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "DOG_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Update dog API error (dog_id: {dog_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "프로필 수정 중 오류가 발생했습니다."}), 500
