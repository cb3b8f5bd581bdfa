"""
Scan payload codec.
The string embedded in the QR image is a flat JSON object holding the
credential and the attendee identifier. Rendering the image is left to
the client.
"""

import json

from checkin_service.errors import InvalidArgument


def encode_payload(credential, identifier):
    return json.dumps({"token": credential, "studentId": identifier}, separators=(",", ":"))


def decode_payload(text):
    """Return ``(credential, identifier)`` from a scanned payload string."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise InvalidArgument("INVALID_PAYLOAD", "QR payload is not valid JSON")

    if not isinstance(data, dict):
        raise InvalidArgument("INVALID_PAYLOAD", "QR payload must be a JSON object")

    token = data.get("token")
    identifier = data.get("studentId")
    if not isinstance(token, str) or not isinstance(identifier, str) or not token or not identifier:
        raise InvalidArgument("INVALID_PAYLOAD", "QR payload must contain token and studentId")
    return token, identifier
