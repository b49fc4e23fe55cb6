import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from main import app

from .conftest import arm_raise_frame, make_frame


def payload(frame, timestamp_ms=None):
    body = {"landmarks": [{"x": lm.x, "y": lm.y, "visibility": lm.visibility} for lm in frame]}
    if timestamp_ms is not None:
        body["timestamp_ms"] = timestamp_ms
    return body


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_id(client):
    response = client.post("/api/motion/sessions", json={
        "user_id": "user-1",
        "exercise_type": "arm_raise",
        "difficulty": "beginner",
    })
    assert response.status_code == 200
    return response.json()["session_id"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_exercises(client):
    body = client.get("/api/motion/exercises").json()
    assert body["success"] is True
    ids = [e["id"] for e in body["data"]["exercises"]]
    assert ids[:3] == ["arm_raise", "torso_twist", "knee_raise"]
    assert body["data"]["default_order"] == ["arm_raise", "torso_twist", "knee_raise"]
    timed = {e["id"]: e["timed"] for e in body["data"]["exercises"]}
    assert timed["push_up"] is False
    assert timed["static_lunge"] is True
    assert timed["plank_hold"] is True


def test_list_difficulty_levels(client):
    levels = client.get("/api/motion/difficulty-levels").json()["data"]["levels"]
    assert [level["level"] for level in levels] == ["beginner", "intermediate", "advanced", "expert"]
    assert levels[0]["tempo"] == "3-3"


def test_start_session_rejects_unknown_exercise(client):
    response = client.post("/api/motion/sessions", json={"user_id": "user-1", "exercise_type": "handstand"})
    assert response.status_code == 400


def test_unknown_session_is_404(client):
    response = client.post("/api/motion/sessions/nope/frames", json=payload(make_frame()))
    assert response.status_code == 404


def test_frame_batch_counts_rep(client, session_id):
    frames = [
        payload(arm_raise_frame(160), 0),
        payload(arm_raise_frame(160), 2000),
        payload(arm_raise_frame(10), 2001),
        payload(arm_raise_frame(10), 4000),
    ]
    response = client.post(f"/api/motion/sessions/{session_id}/frames/batch", json={"frames": frames})

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["analysis"]["reps"] for r in results] == [0, 0, 1, 1]
    assert results[2]["events"][0]["type"] == "rep_completed"


def test_single_frame(client, session_id):
    response = client.post(f"/api/motion/sessions/{session_id}/frames", json=payload(arm_raise_frame(160), 0))
    body = response.json()
    assert body["analysis"]["stage"] == "up"
    assert body["target_stage"] == "down"


def test_switch_pause_resume_complete(client, session_id):
    base = f"/api/motion/sessions/{session_id}"

    switched = client.post(f"{base}/exercise", json={"exercise_type": "torso_twist"}).json()
    assert switched["events"][0]["type"] == "exercise_start"

    assert client.post(f"{base}/pause").json()["status"] == "paused"
    assert client.post(f"{base}/frames", json=payload(make_frame(), 0)).json()["message"] == "Session not active"
    assert client.post(f"{base}/resume").json()["status"] == "resumed"
    assert client.post(f"{base}/resume").status_code == 400

    assert client.get(base).json()["exercise_type"] == "torso_twist"

    summary = client.post(f"{base}/complete").json()
    assert summary["status"] == "completed"
    assert len(summary["exercises"]) == 2

    assert client.get(base).status_code == 404


def test_websocket_stream(client, session_id):
    with client.websocket_connect(f"/api/motion/ws/session/{session_id}") as ws:
        started = ws.receive_json()
        assert started["type"] == "SESSION_STARTED"
        assert started["target_reps"] == 5

        ws.send_json(payload(arm_raise_frame(160), 0))
        result = ws.receive_json()
        assert result["type"] == "FRAME_RESULT"
        assert result["analysis"]["stage"] == "up"

        ws.send_json({"landmarks": "not a list"})
        assert ws.receive_json()["type"] == "ERROR"


def test_websocket_unknown_session(client):
    with client.websocket_connect("/api/motion/ws/session/missing") as ws:
        assert ws.receive_json()["type"] == "ERROR"


def test_websocket_malformed_messages_keep_stream_open(client, session_id):
    with client.websocket_connect(f"/api/motion/ws/session/{session_id}") as ws:
        ws.receive_json()

        ws.send_text("not json at all")
        assert ws.receive_json()["type"] == "ERROR"

        ws.send_json([1, 2, 3])
        assert ws.receive_json()["type"] == "ERROR"

        ws.send_json(payload(arm_raise_frame(160), 0))
        result = ws.receive_json()
        assert result["type"] == "FRAME_RESULT"
        assert result["analysis"]["stage"] == "up"


def test_websocket_closes_when_session_completed(client, session_id):
    with client.websocket_connect(f"/api/motion/ws/session/{session_id}") as ws:
        ws.receive_json()

        assert client.post(f"/api/motion/sessions/{session_id}/complete").status_code == 200

        ws.send_json(payload(arm_raise_frame(160), 0))
        error = ws.receive_json()
        assert error["type"] == "ERROR"
        assert session_id in error["message"]

        with pytest.raises(WebSocketDisconnect):
            ws.receive_json()
