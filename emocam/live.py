# emocam/live.py
"""
Desktop live window.

Opens the webcam in an OpenCV window and draws, on every frame:
- the detection box + expression labels of the latest tick
- the dominant emotion, its intensity bar and the alert banner

Keys: 's' start/stop video, 'c' capture a screenshot to SCREENSHOT_DIR, 'q' quit.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import cv2
import numpy as np

from emocam.config import Settings
from emocam.controller import EmotionController
from emocam.errors import EmoCamError
from emocam.models import UIState
from emocam.screenshot import save as save_screenshot
from emocam.view import LOADING_TEXT, ViewModel, intensity_color
from emocam.visual import draw_status

logger = logging.getLogger(__name__)

WINDOW = "Facial Emotion Detection (s start/stop, c capture, q quit)"


def _ascii(text: Optional[str]) -> str:
    # Hershey fonts only render ASCII
    return (text or "").encode("ascii", "ignore").decode("ascii").strip()


def _hex_to_bgr(color: str) -> tuple[int, int, int]:
    c = color.lstrip("#")
    r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    return (b, g, r)


def render_window_frame(frame: Optional[np.ndarray], state: UIState, settings: Settings,
                        message: Optional[str] = None) -> np.ndarray:
    """Compose what the desktop window shows for one refresh."""
    if frame is None:
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
    if state.loading:
        return draw_status(frame, _ascii(LOADING_TEXT))
    if state.model_error:
        return draw_status(frame, "Model error", alert_message=_ascii(state.model_error))

    vm = ViewModel.from_state(state, settings.INTENSITY_HIGH)
    label = state.emotion.value.upper() if state.emotion else _ascii(vm.emotion_text)
    if not state.video_playing:
        label = "Press 's' to start video"
    return draw_status(
        frame,
        label,
        intensity=state.intensity,
        alert_message=_ascii(message or state.camera_error or state.alert_message),
        bar_color=_hex_to_bgr(intensity_color(state.intensity, settings.INTENSITY_HIGH)),
    )


async def _run_window(controller: EmotionController) -> None:
    s = controller.s
    message: Optional[str] = None
    load = asyncio.ensure_future(controller.load_models())
    try:
        while True:
            frame = controller.render_frame()
            cv2.imshow(WINDOW, render_window_frame(frame, controller.snapshot(), s, message))
            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            try:
                if key == ord("s"):
                    message = None
                    if controller.playing:
                        await controller.stop_video()
                    else:
                        await controller.start_video()
                elif key == ord("c"):
                    path = save_screenshot(controller.capture(), s.SCREENSHOT_DIR)
                    message = f"Saved {path}"
                    logger.info(f"[live] screenshot saved to {path}")
            except EmoCamError as e:
                message = str(e)
                logger.warning(f"[live] {e}")
            await asyncio.sleep(1.0 / max(1.0, s.STREAM_FPS))
    finally:
        if not load.done():
            load.cancel()
        await controller.close()
        cv2.destroyAllWindows()


def run_live_overlay(settings: Settings, camera_index: Optional[int] = None, detector=None) -> None:
    """
    Open the desktop window and run until 'q'. The camera and the polling task
    are always released on exit.
    """
    if camera_index is not None:
        settings = settings.model_copy(update={"CAMERA_INDEX": camera_index})
    controller = EmotionController(settings, detector=detector)
    asyncio.run(_run_window(controller))
