import asyncio
import time
import pytest
from fastapi.testclient import TestClient

import api.routes as routes
import emocam.camera as camera
from api.main import app
from conftest import DummyCap, FakeDetector
from emocam.controller import EmotionController


@pytest.fixture
def controller(settings, caps, happy, monkeypatch):
    ctrl = EmotionController(settings, detector=FakeDetector([happy]))
    ctrl.load_models_blocking()
    monkeypatch.setattr(routes, "controller", ctrl)
    return ctrl


@pytest.fixture
def client(controller):
    with TestClient(app) as c:
        yield c


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200 and r.json() == {"status": "ok"}

def test_index(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "Facial Emotion Detection" in r.text and "Start Video" in r.text

def test_state_ready(client):
    j = client.get("/state").json()
    assert j["loading"] is False and j["video_playing"] is False
    assert j["emotion_text"] == "Detecting..." and j["toggle_label"] == "Start Video"

def test_video_start_stop(client, controller, caps):
    r = client.post("/video/start")
    assert r.status_code == 200 and r.json()["status"] == "started"
    assert client.post("/video/start").json()["status"] == "already_running"
    assert client.get("/state").json()["video_playing"] is True

    r = client.post("/video/stop")
    assert r.json()["status"] == "stopped"
    assert client.post("/video/stop").json()["status"] == "not_running"
    j = client.get("/state").json()
    assert j["video_playing"] is False and j["emotion"] is None and j["alert_message"] is None
    assert caps[0].released and controller.camera.active_tracks == 0

def test_screenshot_flow(client, controller):
    assert client.post("/screenshot").status_code == 409
    assert client.get("/screenshot").status_code == 404

    client.post("/video/start")
    controller.sink.wait_for_frame()
    r = client.post("/screenshot")
    assert r.status_code == 200
    assert (r.json()["width"], r.json()["height"]) == (64, 48)
    client.post("/video/stop")

    r = client.get("/screenshot")
    assert r.status_code == 200 and r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")
    assert client.get("/state").json()["screenshot"]["width"] == 64

def test_camera_error(client, monkeypatch):
    monkeypatch.setattr(camera.cv2, "VideoCapture", lambda idx: DummyCap(opened=False))
    r = client.post("/video/start")
    assert r.status_code == 503
    j = client.get("/state").json()
    assert j["camera_error"] and j["video_playing"] is False

def test_stream_requires_video(client):
    assert client.get("/stream").status_code == 409

def test_model_failure(settings, caps, monkeypatch):
    ctrl = EmotionController(settings, detector=FakeDetector(fail_on="face_expression_model"))
    monkeypatch.setattr(routes, "controller", ctrl)
    with TestClient(app) as c:
        for _ in range(100):
            j = c.get("/state").json()
            if not j["loading"]:
                break
            time.sleep(0.01)
        assert j["model_error"]
        assert c.post("/video/start").status_code == 409
    assert caps == []

def test_mjpeg_frames(controller):
    async def scenario():
        await controller.start_video()
        frames = routes._mjpeg_frames()
        chunk = await frames.__anext__()
        await frames.aclose()
        await controller.stop_video()
        return chunk

    chunk = asyncio.run(scenario())
    assert chunk.startswith(b"--frame\r\nContent-Type: image/jpeg\r\n\r\n")
