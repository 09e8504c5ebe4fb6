# pawtrail/api/activity/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from .schemas import RecentActivityQuerySchema, DateRangeQuerySchema, ActivityItemSchema

activity_bp = Blueprint('activity_bp', __name__)

@activity_bp.route('', methods=['GET'])
@jwt_required()
def get_recent_activity():
    """
    가족 전체의 최근 활동(완료된 산책 + 급식) 피드 API.

    쿼리 파라미터:
    - limit: 조회 개수 (기본값 ACTIVITY_DEFAULT_LIMIT, 최대 ACTIVITY_MAX_LIMIT)

    예시:
    - GET /api/activity?limit=5
    """
    service = current_app.services['activity']
    try:
        params = RecentActivityQuerySchema().load(request.args)
        limit = params.get('limit', current_app.config['ACTIVITY_DEFAULT_LIMIT'])
        limit = min(limit, current_app.config['ACTIVITY_MAX_LIMIT'])

        activities = service.get_recent_activity(limit)
        return jsonify(ActivityItemSchema(many=True).dump(activities)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Recent activity API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "활동 기록 조회 중 오류가 발생했습니다."}), 500

@activity_bp.route('/range', methods=['GET'])
@jwt_required()
def get_activity_by_date_range():
    """
    기간 내 모든 활동 조회 API (양 끝 포함, 개수 제한 없음).

    쿼리 파라미터:
    - start_date, end_date: ISO-8601 시각 또는 YYYY-MM-DD (end_date 가 날짜만이면 그 날 끝까지)

    예시:
    - GET /api/activity/range?start_date=2024-12-20&end_date=2024-12-24
    - GET /api/activity/range?start_date=2024-12-20T06:00:00Z&end_date=2024-12-20T12:00:00Z
    """
    service = current_app.services['activity']
    try:
        window = DateRangeQuerySchema().load(request.args)
        activities = service.get_activity_by_date_range(window['start'], window['end'])
        return jsonify(ActivityItemSchema(many=True).dump(activities)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_DATE_RANGE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"Activity range API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "활동 기록 조회 중 오류가 발생했습니다."}), 500
