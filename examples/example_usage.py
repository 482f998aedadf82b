"""Example: drive the issuer and verifier directly (no Flask).

Controllers are a thin layer; the rules live in the services.
"""

from qr_attendance.container import build_container
from qr_attendance.core.enums import Role
from qr_attendance.core.exceptions import DuplicateAttendanceError


def main():
    container = build_container(
        db_config={},
        store_backend="memory",
        demo_lessons=[{"lesson_id": "L1", "class_id": "C1", "teacher_id": "T1", "students": ["S1"]}],
    )
    issued = container.token_issuer.issue_session("L1", requester_id="T1", requester_role=Role.TEACHER)
    print("expires at", issued.expires_at.isoformat())

    record = container.token_verifier.record_attendance(issued.token, student_id="S1", origin_address="127.0.0.1")
    print("recorded", record.student_id, "at", record.recorded_at.isoformat())

    try:
        container.token_verifier.record_attendance(issued.token, student_id="S1")
    except DuplicateAttendanceError as e:
        print("second scan rejected:", e)


if __name__ == "__main__":
    main()
