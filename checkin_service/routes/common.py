from flask import current_app, jsonify, request

from checkin_service.errors import InvalidArgument


def orchestrator():
    return current_app.extensions["checkin"]


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument("VALIDATION_ERROR", "Request body must be a JSON object")
    return data


def require_string(data, field):
    """Return the trimmed value of ``field`` or reject the request."""
    value = data.get(field)
    if value is None or value == "":
        raise InvalidArgument("VALIDATION_ERROR", f"{field} is required")
    if not isinstance(value, str):
        raise InvalidArgument("VALIDATION_ERROR", f"{field} must be of type string")
    if not value.strip():
        raise InvalidArgument("VALIDATION_ERROR", f"{field} cannot be empty or whitespace only")
    return value.strip()


def require_bool(data, field):
    value = data.get(field)
    if not isinstance(value, bool):
        raise InvalidArgument("INVALID_FLAG", f"{field} must be of type boolean")
    return value


def error_response(status_code, error_code, message):
    return jsonify({
        "success": False,
        "error_code": error_code,
        "message": message,
    }), status_code


def claim_flags(claim):
    return {
        "tshirt_claimed": bool(claim.garment_claimed) if claim else False,
        "meal_claimed": bool(claim.meal_claimed) if claim else False,
    }
