from flask import Blueprint, jsonify

from checkin_service.models.claim import ItemKind
from checkin_service.routes.common import (
    claim_flags,
    error_response,
    json_body,
    orchestrator,
    require_bool,
    require_string,
)

distribution_bp = Blueprint('distribution', __name__)


@distribution_bp.route('/distribution-status/<student_id>', methods=['GET'])
def get_distribution_status(student_id):
    """
    Get distribution status for a student
    ---
    tags:
      - Distribution
    parameters:
      - in: path
        name: student_id
        required: true
        type: string
    responses:
      200:
        description: Claim flags (false when nothing was claimed yet)
      404:
        description: Student not found
    """
    found = orchestrator().claim_status(student_id)
    if found is None:
        return error_response(404, 'STUDENT_NOT_FOUND', 'Student not found')

    attendee, claim = found
    return jsonify({
        'success': True,
        'student_id': attendee.identifier,
        'status': claim_flags(claim),
    }), 200


@distribution_bp.route('/distribution-status', methods=['PATCH'])
def update_distribution_status():
    """
    Admin override of a distribution flag (check or uncheck)
    ---
    tags:
      - Distribution
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - student_id
            - item_type
            - collected
          properties:
            student_id:
              type: string
            item_type:
              type: string
              enum: [tshirt, meal]
            collected:
              type: boolean
    responses:
      200:
        description: Updated claim flags
      400:
        description: Invalid input
      404:
        description: Student not found
    """
    data = json_body()
    student_id = require_string(data, 'student_id')
    item = ItemKind.parse(require_string(data, 'item_type'))
    collected = require_bool(data, 'collected')

    updated = orchestrator().set_item_status(student_id, item, collected)
    if updated is None:
        return error_response(404, 'STUDENT_NOT_FOUND', 'Student not found')

    attendee, claim = updated
    return jsonify({
        'success': True,
        'claim': dict(student_id=attendee.identifier, **claim_flags(claim)),
    }), 200
