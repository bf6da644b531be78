
from emocam.config import Settings

def test_Settings():
    s = Settings()
    assert s.DETECTION_INTERVAL == 0.2
    assert s.ALERT_THRESHOLD == 0.8
    assert s.DETECTOR_MODEL == "tiny_face_detector_model"
    assert s.EXPRESSION_MODEL == "face_expression_model"
    # override via env-like behavior (construct new instance)
    s2 = Settings(CAMERA_INDEX=2, DETECTION_INTERVAL=0.5)
    assert s2.CAMERA_INDEX == 2 and s2.DETECTION_INTERVAL == 0.5

def test_Settings_normalizes_invalid_values():
    s = Settings(DETECTOR_BACKEND="  RetinaFace  # fast", LOG_LEVEL="chatty", DETECTION_INTERVAL=0)
    assert s.DETECTOR_BACKEND == "retinaface"
    assert s.LOG_LEVEL == "INFO"
    assert s.DETECTION_INTERVAL == 0.2
    assert Settings(DETECTOR_BACKEND="nope").DETECTOR_BACKEND == "opencv"

def test_Settings_env_override(monkeypatch):
    import importlib
    import emocam.config as config
    monkeypatch.setenv("CAMERA_INDEX", "3")
    monkeypatch.setenv("MODEL_BASE_PATH", "/srv/models")
    reloaded = importlib.reload(config)
    try:
        s = reloaded.Settings()
        assert s.CAMERA_INDEX == 3
        assert s.MODEL_BASE_PATH == "/srv/models"
    finally:
        monkeypatch.undo()
        importlib.reload(config)
