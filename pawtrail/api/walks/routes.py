# pawtrail/api/walks/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from pawtrail.models.walk import WalkEventType
from pawtrail.utils.datetime_utils import DateTimeUtils
from .schemas import (
    WalkStartSchema,
    WalkUpdateSchema,
    WalkEventCreateSchema,
    WalkListQuerySchema,
    WalkResponseSchema,
    WalkEventResponseSchema
)
from .services import ActiveWalkConflictError

walks_bp = Blueprint('walks_bp', __name__)

@walks_bp.route('', methods=['POST'])
@jwt_required()
def start_walk():
    """산책 시작 API. 이미 진행 중인 산책이 있으면 409를 반환합니다."""
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        data = WalkStartSchema().load(request.get_json(silent=True) or {})
        walk = service.start_walk(user_id, data.get('start_time'))
        return jsonify(WalkResponseSchema().dump(walk)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ActiveWalkConflictError as e:
        return jsonify({
            "error_code": "ACTIVE_WALK_EXISTS",
            "message": str(e),
            "active_walk_id": e.active_walk_id,
            "retryable": e.retryable
        }), 409
    except Exception as e:
        logging.error(f"Walk start API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "WALK_START_FAILED", "message": "산책 시작 중 오류가 발생했습니다."}), 500

@walks_bp.route('/active', methods=['GET'])
@jwt_required()
def get_active_walk():
    """
    진행 중인 산책 조회 API. 없으면 null 을 반환합니다.
    클라이언트는 X-Poll-Interval 헤더(초) 주기로 이 API를 다시 호출합니다.
    """
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        walk = service.get_active_walk(user_id)
        body = WalkResponseSchema().dump(walk) if walk else None
        response = jsonify(body)
        response.headers['X-Poll-Interval'] = str(current_app.config['WALK_POLL_INTERVAL_SECONDS'])
        return response, 200
    except Exception as e:
        logging.error(f"Active walk API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "진행 중인 산책 조회 중 오류가 발생했습니다."}), 500

@walks_bp.route('', methods=['GET'])
@jwt_required()
def list_walks():
    """내 산책 목록을 최신순으로 조회합니다."""
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        params = WalkListQuerySchema().load(request.args)
        walks = service.get_user_walks(user_id, params['limit'])
        return jsonify(WalkResponseSchema(many=True).dump(walks)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Walk list API error (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "산책 목록 조회 중 오류가 발생했습니다."}), 500

@walks_bp.route('/<string:walk_id>', methods=['GET'])
@jwt_required()
def get_walk(walk_id: str):
    """산책 하나를 이벤트와 함께 조회합니다."""
    service = current_app.services['walks']
    try:
        walk = service.get_walk(walk_id)
        return jsonify(WalkResponseSchema().dump(walk)), 200
    except FileNotFoundError as e:
        return jsonify({"error_code": "WALK_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"Get walk API error (walk_id: {walk_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "산책 조회 중 오류가 발생했습니다."}), 500

@walks_bp.route('/<string:walk_id>', methods=['PUT'])
@jwt_required()
def update_walk(walk_id: str):
    """
    산책 완료 및 기록 수정 API.
    - is_completed=true: 완료 처리. end_time 생략 시 현재 시각, duration 생략 시
      start_time 부터 end_time 까지의 경과 분(내림)으로 계산합니다.
    - 그 외: start_time / end_time / duration 부분 수정.
    """
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        data = WalkUpdateSchema().load(request.get_json(silent=True) or {})
        if not data:
            return jsonify({"error_code": "NO_DATA", "message": "수정할 데이터가 없습니다."}), 400

        if data.pop('is_completed', False):
            if 'start_time' in data:
                service.update_walk(walk_id, {'start_time': data['start_time']}, user_id=user_id)
            walk = service.get_walk(walk_id)
            end_time = data.get('end_time') or DateTimeUtils.now()
            duration = data.get('duration')
            if duration is None:
                duration = DateTimeUtils.elapsed_minutes(walk.start_time, end_time)
            walk = service.complete_walk(walk_id, end_time, duration, user_id=user_id)
        else:
            walk = service.update_walk(walk_id, data, user_id=user_id)

        return jsonify(WalkResponseSchema().dump(walk)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "message": str(e)}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "WALK_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Update walk API error (walk_id: {walk_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "산책 수정 중 오류가 발생했습니다."}), 500

@walks_bp.route('/<string:walk_id>', methods=['DELETE'])
@jwt_required()
def delete_walk(walk_id: str):
    """산책과 하위 이벤트를 함께 삭제합니다."""
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        service.delete_walk(walk_id, user_id=user_id)
        return '', 204
    except FileNotFoundError as e:
        return jsonify({"error_code": "WALK_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Delete walk API error (walk_id: {walk_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "산책 삭제 중 오류가 발생했습니다."}), 500

@walks_bp.route('/<string:walk_id>/events', methods=['POST'])
@jwt_required()
def log_walk_event(walk_id: str):
    """산책 중 배변 이벤트(pee/poo) 기록 API."""
    user_id = get_jwt_identity()
    service = current_app.services['walks']
    try:
        data = WalkEventCreateSchema().load(request.get_json(silent=True) or {})
        event = service.log_event(
            walk_id,
            WalkEventType(data['event_type']),
            timestamp=data.get('timestamp'),
            user_id=user_id
        )
        return jsonify(WalkEventResponseSchema().dump(event)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "WALK_NOT_FOUND", "message": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Walk event API error (walk_id: {walk_id}): {e}", exc_info=True)
        return jsonify({"error_code": "EVENT_CREATION_FAILED", "message": "이벤트 기록 중 오류가 발생했습니다."}), 500
