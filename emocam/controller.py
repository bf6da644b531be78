"""
Controller owning the UI state.

UIState is only changed through load / start / stop / tick / capture and is
handed to views as immutable snapshots.
"""
# emocam/controller.py
from __future__ import annotations
from typing import Optional
import logging

import numpy as np

from emocam.alerts import alert
from emocam.camera import CameraController, VideoSink
from emocam.config import Settings
from emocam.detector import DeepFaceDetector
from emocam.emotion import dominant_emotion
from emocam.errors import CameraError, CaptureError
from emocam.loader import ModelLoader
from emocam.loop import DetectionLoop
from emocam.models import Detection, Screenshot, UIState
from emocam.screenshot import capture as capture_frame
from emocam.visual import Overlay

logger = logging.getLogger(__name__)


class EmotionController:
    def __init__(self, settings: Settings, detector=None):
        self.s = settings
        self.detector = detector if detector is not None else DeepFaceDetector(settings)
        self.loader = ModelLoader(settings, self.detector)
        self.sink = VideoSink()
        self.camera = CameraController(settings, self.sink)
        self.overlay = Overlay()
        self.loop = DetectionLoop(
            settings.DETECTION_INTERVAL,
            self.sink,
            self.overlay,
            self.detector,
            self._apply_detection,
            expression_min_confidence=settings.EXPRESSION_MIN_CONFIDENCE,
        )
        # The loop starts when the sink reports a bound, playing stream
        self.sink.on_play(self.loop.start)
        self._state = UIState()

    # ---- state ----
    def snapshot(self) -> UIState:
        return self._state

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    def _apply_loader_status(self) -> None:
        if self.loader.status == "ready":
            self._update(loading=False, model_error=None)
        elif self.loader.status == "failed":
            self._update(loading=False, model_error=self.loader.error)

    def _apply_detection(self, detection: Optional[Detection]) -> None:
        dom = dominant_emotion(detection.expressions) if detection is not None else None
        if dom is None:
            self._update(emotion=None, intensity=0.0, alert_message=None)
            return
        self._update(
            emotion=dom.emotion,
            intensity=dom.probability,
            alert_message=alert(dom.emotion, dom.probability, self.s.ALERT_THRESHOLD),
        )

    # ---- models ----
    async def load_models(self) -> str:
        status = await self.loader.load()
        self._apply_loader_status()
        return status

    def load_models_blocking(self) -> str:
        status = self.loader.load_blocking()
        self._apply_loader_status()
        return status

    # ---- camera ----
    @property
    def playing(self) -> bool:
        return self._state.video_playing

    async def start_video(self) -> bool:
        """
        Open the camera and begin polling.

        Returns False when already playing.

        Raises:
            ModelsNotReadyError / ModelLoadError: models not usable.
            CameraError: camera denied or unavailable (also kept in UIState).
        """
        self.loader.require_ready()
        if self.camera.playing:
            return False
        try:
            self.camera.start()
        except CameraError as e:
            logger.warning(f"[controller] camera start failed: {e}")
            self._update(camera_error=str(e), video_playing=False)
            raise
        self._update(video_playing=True, camera_error=None)
        return True

    async def stop_video(self) -> bool:
        """Stop polling, release the camera and clear the emotion readout. Idempotent."""
        was_playing = self.camera.playing or self.loop.running
        await self.loop.stop()
        self.camera.stop()
        self.overlay.clear()
        self._update(video_playing=False, emotion=None, intensity=0.0, alert_message=None)
        return was_playing

    # ---- screenshot ----
    def capture(self) -> Screenshot:
        if not self._state.video_playing or not self.sink.bound:
            raise CaptureError("No active video stream to capture")
        frame = self.sink.frame
        if frame is None:
            raise CaptureError("Video stream has no frame yet")
        shot = capture_frame(frame)
        self._update(screenshot=shot)
        return shot

    # ---- rendering ----
    def render_frame(self) -> Optional[np.ndarray]:
        """Latest frame with the overlay on top, or None when nothing is playing."""
        if not self.sink.bound:
            return None
        frame = self.sink.frame
        if frame is None:
            return None
        return self.overlay.composite(frame)

    # ---- teardown ----
    async def close(self) -> None:
        await self.stop_video()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()
