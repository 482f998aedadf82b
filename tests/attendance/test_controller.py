from __future__ import annotations

import io
from datetime import timedelta, timezone

import pytest

from qr_attendance.attendance import qr_codec
from qr_attendance.core.exceptions import StorageUnavailableError
from qr_attendance.main import create_app


@pytest.fixture
def app(monkeypatch, clock, lesson_seed):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app({"DEMO_LESSONS": lesson_seed}, clock=clock)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id: str, role: str) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def generate(client, lesson_id="L1"):
    login(client, "T1", "teacher")
    return client.post(f"/api/lessons/{lesson_id}/qrcode")


def scan(client, token, student_id="S1"):
    login(client, student_id, "student")
    return client.post("/api/lessons/scan-qrcode", json={"qrData": token})


def test_generate_returns_token_expiry_and_image(client, clock):
    resp = generate(client)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert len(body["qrCode"]["data"]) == 32
    expected = (clock.now() + timedelta(minutes=15)).replace(tzinfo=timezone.utc)
    assert body["qrCode"]["expiresAt"] == expected.isoformat()
    assert body["qrCode"]["expiresAt"].endswith("+00:00")
    assert body["qrCode"]["image"].startswith("data:image/png;base64,")


def test_generate_requires_login(client):
    resp = client.post("/api/lessons/L1/qrcode")

    assert resp.status_code == 401


def test_generate_forbidden_for_students(client):
    login(client, "S1", "student")

    assert client.post("/api/lessons/L1/qrcode").status_code == 403


def test_generate_unknown_lesson(client):
    assert generate(client, "NOPE").status_code == 404


def test_generate_for_someone_elses_lesson(client):
    resp = generate(client, "L2")

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Not authorized to manage this lesson"


def test_scan_flow(client, clock):
    token = generate(client).get_json()["qrCode"]["data"]

    clock.advance(seconds=10)
    ok = scan(client, token)
    assert ok.status_code == 200
    assert ok.get_json()["attendance"]["lessonId"] == "L1"
    assert ok.get_json()["attendance"]["recordedAt"].endswith("+00:00")

    clock.advance(seconds=1)
    dup = scan(client, token)
    assert dup.status_code == 409
    assert dup.get_json()["success"] is False


def test_scan_records_origin_address(client):
    token = generate(client).get_json()["qrCode"]["data"]
    login(client, "S1", "student")

    resp = client.post(
        "/api/lessons/scan-qrcode",
        json={"qrData": token},
        environ_base={"REMOTE_ADDR": "192.168.1.20"},
    )

    assert resp.get_json()["attendance"]["ipAddress"] == "192.168.1.20"


def test_scan_unknown_and_expired_are_indistinguishable(client, clock):
    token = generate(client).get_json()["qrCode"]["data"]

    unknown = scan(client, "0" * 32)
    clock.advance(timedelta(minutes=15))
    expired = scan(client, token)

    assert unknown.status_code == expired.status_code == 404
    assert unknown.get_json() == expired.get_json()


def test_scan_not_enrolled(client):
    token = generate(client).get_json()["qrCode"]["data"]

    resp = scan(client, token, student_id="S4")

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "You are not enrolled in this class"


def test_scan_requires_qr_data(client):
    login(client, "S1", "student")

    resp = client.post("/api/lessons/scan-qrcode", json={})

    assert resp.status_code == 400


@pytest.mark.parametrize("qr_data", ["   ", 12345, None])
def test_scan_rejects_blank_or_non_string_qr_data(client, qr_data):
    login(client, "S1", "student")

    resp = client.post("/api/lessons/scan-qrcode", json={"qrData": qr_data})

    assert resp.status_code == 400


def test_scan_does_not_trim_qr_data(client):
    token = generate(client).get_json()["qrCode"]["data"]

    resp = scan(client, " " + token + "\n")

    assert resp.status_code == 404
    assert scan(client, token).status_code == 200


def test_scan_forbidden_for_teachers(client):
    login(client, "T1", "teacher")

    assert client.post("/api/lessons/scan-qrcode", json={"qrData": "x"}).status_code == 403


def test_scan_image_decodes_and_records(client, monkeypatch):
    token = generate(client).get_json()["qrCode"]["data"]
    monkeypatch.setattr(qr_codec, "decode_image", lambda stream: token)
    login(client, "S2", "student")

    resp = client.post(
        "/api/lessons/scan-qrcode/image",
        data={"image": (io.BytesIO(b"png-bytes"), "qr.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["studentId"] == "S2"


def test_scan_image_without_qr(client, monkeypatch):
    monkeypatch.setattr(qr_codec, "decode_image", lambda stream: None)
    login(client, "S1", "student")

    resp = client.post(
        "/api/lessons/scan-qrcode/image",
        data={"image": (io.BytesIO(b"nothing"), "blank.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400


def test_scan_image_requires_file(client):
    login(client, "S1", "student")

    assert client.post("/api/lessons/scan-qrcode/image", data={}).status_code == 400


def test_attendance_list(client, clock):
    token = generate(client).get_json()["qrCode"]["data"]
    scan(client, token, "S1")
    clock.advance(seconds=5)
    scan(client, token, "S2")

    login(client, "T1", "teacher")
    resp = client.get("/api/lessons/L1/attendance")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["attendanceCount"] == 2
    assert [r["studentId"] for r in body["attendanceList"]] == ["S2", "S1"]


def test_attendance_list_other_teacher(client):
    login(client, "T2", "teacher")

    assert client.get("/api/lessons/L1/attendance").status_code == 403


def test_storage_failure_maps_to_503(client, app, monkeypatch):
    container = app.extensions["qr_attendance"]

    def boom(token):
        raise StorageUnavailableError("Storage unavailable (token lookup)")

    monkeypatch.setattr(container.session_store, "find_active_session_by_token", boom)

    assert scan(client, "whatever").status_code == 503
