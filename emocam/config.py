"""
Configuration for the live emotion overlay.
"""
from pydantic import BaseModel
import os

class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    MODEL_BASE_PATH: str = os.getenv("MODEL_BASE_PATH", "models")
    DETECTOR_MODEL: str = os.getenv("DETECTOR_MODEL", "tiny_face_detector_model")
    EXPRESSION_MODEL: str = os.getenv("EXPRESSION_MODEL", "face_expression_model")
    DETECTOR_BACKEND: str = (os.getenv("DETECTOR_BACKEND", "opencv") or "opencv")

    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    DETECTION_INTERVAL: float = float(os.getenv("DETECTION_INTERVAL", "0.2"))
    ALERT_THRESHOLD: float = float(os.getenv("ALERT_THRESHOLD", "0.8"))
    INTENSITY_HIGH: float = float(os.getenv("INTENSITY_HIGH", "0.5"))

    MIN_FACE_SIZE: int = int(os.getenv("MIN_FACE_SIZE", "40"))
    MIN_FACE_CONFIDENCE: float = float(os.getenv("MIN_FACE_CONFIDENCE", "0.5"))
    EXPRESSION_MIN_CONFIDENCE: float = float(os.getenv("EXPRESSION_MIN_CONFIDENCE", "0.1"))

    STREAM_FPS: float = float(os.getenv("STREAM_FPS", "15"))
    SCREENSHOT_DIR: str = os.getenv("SCREENSHOT_DIR", "output")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize DETECTOR_BACKEND: strip comments/extra words, lower-case, validate
        backend = (self.DETECTOR_BACKEND or "opencv").strip().split()[0].lower()
        if backend not in ("opencv", "ssd", "mtcnn", "retinaface", "mediapipe", "yunet", "centerface"):
            backend = "opencv"
        object.__setattr__(self, "DETECTOR_BACKEND", backend)

        level = (self.LOG_LEVEL or "INFO").strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            level = "INFO"
        object.__setattr__(self, "LOG_LEVEL", level)

        if self.DETECTION_INTERVAL <= 0:
            object.__setattr__(self, "DETECTION_INTERVAL", 0.2)
