"""
DeepFace adapter: the external face detector + expression classifier.

DeepFace is imported lazily so tests can monkeypatch sys.modules['deepface']
and so the TensorFlow stack is not loaded at import time.
"""
# emocam/detector.py
from __future__ import annotations
from typing import Dict, List, Optional
import logging
import os

import numpy as np

from emocam.config import Settings
from emocam.emotion import normalize_expressions
from emocam.errors import ModelLoadError
from emocam.models import Box, Detection

logger = logging.getLogger(__name__)

EXPRESSION_MODEL_NAME = "Emotion"


class DeepFaceDetector:
    """Single-face detection with expressions, backed by DeepFace."""

    def __init__(self, settings: Settings):
        self.s = settings
        self._models: Dict[str, object] = {}

    def load_resource(self, name: str, path: str) -> None:
        """Build (and cache the weights of) one named model resource."""
        from deepface import DeepFace

        # DeepFace caches weights under $DEEPFACE_HOME/.deepface/weights
        os.environ.setdefault("DEEPFACE_HOME", os.path.abspath(self.s.MODEL_BASE_PATH))

        if name == self.s.DETECTOR_MODEL:
            logger.debug(f"[detector] building face detector backend={self.s.DETECTOR_BACKEND} from {path}")
            self._models[name] = DeepFace.build_model(
                model_name=self.s.DETECTOR_BACKEND, task="face_detector"
            )
        elif name == self.s.EXPRESSION_MODEL:
            logger.debug(f"[detector] building expression model from {path}")
            self._models[name] = DeepFace.build_model(
                model_name=EXPRESSION_MODEL_NAME, task="facial_attribute"
            )
        else:
            raise ModelLoadError(f"Unknown model resource: {name}")

    @property
    def loaded(self) -> bool:
        return self.s.DETECTOR_MODEL in self._models and self.s.EXPRESSION_MODEL in self._models

    def _valid(self, r: dict, frame_w: int, frame_h: int) -> bool:
        reg = (r or {}).get("region") or {}
        w = int(reg.get("w", 0)); h = int(reg.get("h", 0))
        if w < self.s.MIN_FACE_SIZE or h < self.s.MIN_FACE_SIZE:
            return False
        # enforce_detection=False falls back to the whole frame when nothing is found
        if w >= frame_w and h >= frame_h:
            return False
        conf = r.get("face_confidence")
        if conf is None:
            conf = 1.0
        try:
            conf = float(conf)
        except (TypeError, ValueError):
            conf = 1.0
        return conf >= self.s.MIN_FACE_CONFIDENCE

    def detect(self, frame: np.ndarray) -> Optional[Detection]:
        """
        Run detection + expression classification on a BGR frame.

        Returns the best single face (highest confidence, then largest box),
        or None when no face passes the size/confidence filters.
        """
        from deepface import DeepFace

        frame_h, frame_w = frame.shape[:2]
        result = DeepFace.analyze(
            frame,
            actions=["emotion"],
            enforce_detection=False,
            detector_backend=self.s.DETECTOR_BACKEND,
            silent=True,
        )
        # DeepFace returns list[dict] or dict depending on version; normalize to list
        results: List[dict] = result if isinstance(result, list) else ([result] if result else [])
        faces = [r for r in results if self._valid(r, frame_w, frame_h)]
        logger.debug(f"[detector] candidates={len(results)} valid={len(faces)}")
        if not faces:
            return None

        def _rank(r: dict):
            reg = r.get("region") or {}
            conf = r.get("face_confidence")
            return (float(conf) if conf is not None else 1.0, int(reg.get("w", 0)) * int(reg.get("h", 0)))

        best = max(faces, key=_rank)
        reg = best.get("region") or {}
        x = max(0, int(reg.get("x", 0))); y = max(0, int(reg.get("y", 0)))
        w = max(0, min(int(reg.get("w", 0)), frame_w - x))
        h = max(0, min(int(reg.get("h", 0)), frame_h - y))
        score = best.get("face_confidence")
        return Detection(
            box=Box(x=x, y=y, w=w, h=h),
            score=float(score) if score is not None else 1.0,
            expressions=normalize_expressions(best.get("emotion") if isinstance(best.get("emotion"), dict) else None),
            frame_width=frame_w,
            frame_height=frame_h,
        )
