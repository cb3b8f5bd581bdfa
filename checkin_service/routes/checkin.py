from flask import Blueprint, jsonify

from checkin_service.models.claim import ClaimResult, ItemKind
from checkin_service.routes.common import (
    claim_flags,
    error_response,
    json_body,
    orchestrator,
    require_string,
)
from checkin_service.services.consolidation import parse_involvements
from checkin_service.services.payload import encode_payload

checkin_bp = Blueprint('checkin', __name__)


def _student_view(attendee):
    data = attendee.to_dict()
    data['involvements'] = parse_involvements(attendee.organization_detail)
    return data


@checkin_bp.route('/validate', methods=['POST'])
def validate_student():
    """
    Validate a student ID and issue a scan token
    ---
    tags:
      - Check-in
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - student_id
          properties:
            student_id:
              type: string
    responses:
      200:
        description: Student found, token issued
      400:
        description: Missing or blank student_id
      404:
        description: Student ID not found
      503:
        description: No unique token could be generated
    """
    data = json_body()
    student_id = require_string(data, 'student_id')

    issued = orchestrator().issue_credential(student_id)
    if issued is None:
        return error_response(404, 'STUDENT_NOT_FOUND', 'Student ID not found')

    attendee, token = issued
    return jsonify({
        'success': True,
        'student': _student_view(attendee),
        'token': token,
        'qr_payload': encode_payload(token, attendee.identifier),
    }), 200


@checkin_bp.route('/scan', methods=['POST'])
def scan_token():
    """
    Resolve a scanned token to the student and their claim status
    ---
    tags:
      - Check-in
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - token
          properties:
            token:
              type: string
    responses:
      200:
        description: Student and claim status
      404:
        description: Invalid QR code
    """
    data = json_body()
    token = require_string(data, 'token')

    scanned = orchestrator().scan(token)
    if scanned is None:
        return error_response(404, 'INVALID_TOKEN', 'Invalid QR code')

    attendee, claim = scanned
    return jsonify({
        'success': True,
        'student': _student_view(attendee),
        'claims': claim_flags(claim),
    }), 200


@checkin_bp.route('/claim', methods=['POST'])
def claim_item():
    """
    Record distribution of a t-shirt or meal coupon
    ---
    tags:
      - Check-in
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - token
            - item_type
          properties:
            token:
              type: string
            item_type:
              type: string
              enum: [tshirt, meal]
    responses:
      200:
        description: Item claimed
      400:
        description: Invalid item type
      404:
        description: Invalid QR code
      409:
        description: Item already claimed
    """
    data = json_body()
    token = require_string(data, 'token')
    item = ItemKind.parse(require_string(data, 'item_type'))

    outcome = orchestrator().claim_item(token, item)
    if outcome is None:
        return error_response(404, 'INVALID_TOKEN', 'Invalid QR code')

    attendee, result, claim = outcome
    if result is ClaimResult.ALREADY_CLAIMED:
        return jsonify({
            'success': False,
            'error_code': 'ALREADY_CLAIMED',
            'message': 'Item already claimed',
            'claims': claim_flags(claim),
        }), 409

    return jsonify({
        'success': True,
        'student_id': attendee.identifier,
        'claims': claim_flags(claim),
    }), 200
