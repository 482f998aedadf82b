from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    DuplicateAttendanceError,
    InvalidOrExpiredTokenError,
    NotEnrolledError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..container import Container
from . import qr_codec
from .model import AttendanceRecord

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidOrExpiredTokenError, 404),
    (NotEnrolledError, 403),
    (DuplicateAttendanceError, 409),
    (StorageUnavailableError, 503),
)


def _fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _domain_error_response(e: DomainError):
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return _fail(str(e), status)
    return _fail(str(e), 400)


def _iso_utc(value: datetime) -> str:
    # Stored timestamps are naive UTC.
    return value.replace(tzinfo=timezone.utc).isoformat()


def _record_json(record: AttendanceRecord) -> dict:
    return {
        "id": record.record_id,
        "lessonId": record.lesson_id,
        "studentId": record.student_id,
        "recordedAt": _iso_utc(record.recorded_at),
        "ipAddress": record.origin_address,
    }


def register(app: Flask, container: Container) -> None:
    def role_required(role: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if "user_id" not in session:
                    return _fail("Authentication required", 401)
                if session.get("role") != role.value:
                    return _fail(f"Access restricted to {role.value}s", 403)
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def _current_user_id() -> str:
        return str(session["user_id"])

    def _record_scan(token: str):
        record = container.token_verifier.record_attendance(
            token,
            student_id=_current_user_id(),
            origin_address=request.remote_addr,
        )
        return jsonify({
            "success": True,
            "message": "Attendance recorded successfully",
            "attendance": _record_json(record),
        }), 200

    @app.route("/api/lessons/<lesson_id>/qrcode", methods=["POST"], endpoint="generate_qrcode")
    @role_required(Role.TEACHER)
    def generate_qrcode(lesson_id: str):
        """Issue a fresh attendance token for the lesson and render it as a QR image."""
        try:
            issued = container.token_issuer.issue_session(
                lesson_id,
                requester_id=_current_user_id(),
                requester_role=Role(session["role"]),
            )
            return jsonify({
                "success": True,
                "message": "QR code generated successfully",
                "qrCode": {
                    "data": issued.token,
                    "expiresAt": _iso_utc(issued.expires_at),
                    "image": qr_codec.render_data_uri(issued.token),
                },
            }), 200
        except DomainError as e:
            return _domain_error_response(e)
        except Exception:
            logger.exception("QR code generation failed for lesson %s", lesson_id)
            return _fail("Server error", 500)

    @app.route("/api/lessons/scan-qrcode", methods=["POST"], endpoint="scan_qrcode")
    @role_required(Role.STUDENT)
    def scan_qrcode():
        """Record attendance from the raw string a student's scanner decoded."""
        try:
            data = request.get_json(silent=True) or {}
            token = require_non_empty(data.get("qrData", ""), "QR code data")
            return _record_scan(token)
        except DomainError as e:
            return _domain_error_response(e)
        except Exception:
            logger.exception("QR scan failed")
            return _fail("Server error", 500)

    @app.route("/api/lessons/scan-qrcode/image", methods=["POST"], endpoint="scan_qrcode_image")
    @role_required(Role.STUDENT)
    def scan_qrcode_image():
        """Accept a photo of the QR code, decode it and record attendance."""
        try:
            if "image" not in request.files:
                raise ValidationError("Image file is required")

            token = qr_codec.decode_image(request.files["image"].stream)
            if not token:
                raise ValidationError("No QR code found in the image")

            return _record_scan(token)
        except DomainError as e:
            return _domain_error_response(e)
        except Exception:
            logger.exception("QR image scan failed")
            return _fail("Server error", 500)

    @app.route("/api/lessons/<lesson_id>/attendance", methods=["GET"], endpoint="attendance_list")
    @role_required(Role.TEACHER)
    def attendance_list(lesson_id: str):
        try:
            records = container.attendance_list_service.list_for_lesson(
                lesson_id,
                requester_id=_current_user_id(),
                requester_role=Role(session["role"]),
            )
            return jsonify({
                "success": True,
                "attendanceCount": len(records),
                "attendanceList": [_record_json(r) for r in records],
            }), 200
        except DomainError as e:
            return _domain_error_response(e)
        except Exception:
            logger.exception("Attendance list failed for lesson %s", lesson_id)
            return _fail("Server error", 500)
