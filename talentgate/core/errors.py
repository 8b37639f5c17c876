"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; `talentgate.main` renders them as
``{"error": {"code": ..., "message": ...}}`` with the matching status.
"""
import re
from typing import Optional

from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SERVER_ERROR"
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


# Largest value a BIGINT primary key can hold.
MAX_ID = 2**63 - 1

_ID_RE = re.compile(r"[0-9]+")


def _digits_to_id(raw: str) -> int:
    digits = raw.lstrip("0")
    if len(digits) > len(str(MAX_ID)):
        return MAX_ID + 1
    return int(digits or "0")


def coerce_id(raw) -> Optional[int]:
    """Plain ASCII digits within the key range, else None."""
    if not isinstance(raw, str) or not _ID_RE.fullmatch(raw):
        return None
    value = _digits_to_id(raw)
    if value <= 0 or value > MAX_ID:
        return None
    return value


def parse_id(raw: str, label: str = "id") -> int:
    """Path ids arrive as strings; a malformed id is a 400, one past the key range can match no row."""
    if not isinstance(raw, str) or not _ID_RE.fullmatch(raw):
        raise ValidationFailed(f"Invalid {label}")
    value = _digits_to_id(raw)
    if value <= 0:
        raise ValidationFailed(f"Invalid {label}")
    if value > MAX_ID:
        raise NotFound(f"Unknown {label}")
    return value
