from flask import Blueprint, jsonify, request

from checkin_service.errors import InvalidArgument
from checkin_service.routes.common import (
    error_response,
    json_body,
    orchestrator,
    require_bool,
    require_string,
)

students_bp = Blueprint('students', __name__)


@students_bp.route('/students/all', methods=['GET'])
def list_students():
    """
    List every student with consent and distribution status
    ---
    tags:
      - Students
    responses:
      200:
        description: All students
    """
    students = orchestrator().roster.all_with_claims()
    return jsonify({
        'success': True,
        'students': students,
        'total': len(students),
    }), 200


@students_bp.route('/students/import', methods=['POST'])
def import_students():
    """
    Import a roster, consolidating duplicate student IDs
    ---
    tags:
      - Students
    consumes:
      - multipart/form-data
      - application/json
    parameters:
      - in: formData
        name: file
        type: file
        description: Roster CSV export
      - in: body
        name: body
        schema:
          type: object
          properties:
            rows:
              type: array
              items:
                type: object
    responses:
      200:
        description: Imported count and skipped rows
      400:
        description: No roster supplied
    """
    upload = request.files.get('file')
    if upload is not None:
        source = upload.read().decode('utf-8-sig')
    else:
        rows = json_body().get('rows')
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise InvalidArgument('VALIDATION_ERROR', 'rows must be a list of objects')
        source = rows

    result = orchestrator().import_roster(source)
    return jsonify(dict(success=True, **result.to_dict())), 200


@students_bp.route('/consent', methods=['POST'])
def record_consent():
    """
    Record PDPA consent for a student
    ---
    tags:
      - Students
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - student_id
            - consented
          properties:
            student_id:
              type: string
            consented:
              type: boolean
    responses:
      200:
        description: Consent recorded
      404:
        description: Student ID not found
    """
    data = json_body()
    student_id = require_string(data, 'student_id')
    consented = require_bool(data, 'consented')

    attendee = orchestrator().record_consent(student_id, consented)
    if attendee is None:
        return error_response(404, 'STUDENT_NOT_FOUND', 'Student ID not found')

    return jsonify({'success': True, 'message': 'Consent recorded successfully'}), 200
