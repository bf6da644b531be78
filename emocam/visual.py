"""Overlay drawing surface & frame annotation helpers.

- Overlay: transparent BGRA canvas sized to the video, holding the detection box
  and expression labels for the latest tick
- draw_status: burn the emotion label / alert banner into a frame (desktop window)
"""
from __future__ import annotations
import cv2
import numpy as np
from typing import Optional, Tuple

from emocam.models import Detection, Emotion

BOX_COLOR = (255, 149, 0, 255)      # BGRA
TEXT_COLOR = (255, 255, 255, 255)
TEXT_BG = (0, 0, 0, 160)


class Overlay:
    """Transparent drawing surface laid over the video."""
    def __init__(self):
        self._canvas = np.zeros((0, 0, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self._canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self._canvas.shape[0])

    @property
    def image(self) -> np.ndarray:
        return self._canvas.copy()

    @property
    def is_blank(self) -> bool:
        return not self._canvas.any()

    def match_dimensions(self, width: int, height: int) -> None:
        """Resize the surface; resizing discards whatever was drawn."""
        if (width, height) != (self.width, self.height):
            self._canvas = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)

    def clear(self) -> None:
        self._canvas[:] = 0

    def _label(self, text: str, org: Tuple[int, int], scale: float = 0.5) -> None:
        (tw, th), base = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, 1)
        x, y = org
        x = max(0, min(x, self.width - tw - 4))
        y = max(th + base, min(y, self.height - 1))
        cv2.rectangle(self._canvas, (x, y - th - base), (x + tw + 4, y + base), TEXT_BG, -1)
        cv2.putText(self._canvas, text, (x + 2, y), cv2.FONT_HERSHEY_SIMPLEX, scale, TEXT_COLOR, 1, cv2.LINE_AA)

    def draw_detection(self, det: Detection) -> None:
        """Draw the face box with its detector score."""
        b = det.box
        x = max(0, min(b.x, self.width - 1)); y = max(0, min(b.y, self.height - 1))
        w = max(0, min(b.w, self.width - x)); h = max(0, min(b.h, self.height - y))
        cv2.rectangle(self._canvas, (x, y), (x + w, y + h), BOX_COLOR, 2)
        self._label(f"{det.score:.2f}", (x, y - 4))

    def draw_expressions(self, det: Detection, min_confidence: float = 0.1) -> None:
        """List every expression above `min_confidence` under the face box."""
        b = det.box
        y = b.y + b.h + 18
        for emo in Emotion:
            p = det.expressions.get(emo)
            if p is None or p <= min_confidence:
                continue
            self._label(f"{emo.value} ({p:.2f})", (b.x, y))
            y += 18

    def composite(self, frame: np.ndarray) -> np.ndarray:
        """Return a copy of `frame` with the overlay painted on top."""
        out = frame.copy()
        if self.width == 0 or self.height == 0:
            return out
        canvas = self._canvas
        h, w = out.shape[:2]
        if (w, h) != (self.width, self.height):
            canvas = cv2.resize(canvas, (w, h), interpolation=cv2.INTER_NEAREST)
        alpha = canvas[..., 3:4].astype(np.float32) / 255.0
        out[:] = (canvas[..., :3] * alpha + out * (1.0 - alpha)).astype(np.uint8)
        return out


def draw_status(frame: np.ndarray,
                emotion_text: str,
                intensity: float = 0.0,
                alert_message: Optional[str] = None,
                bar_color: Tuple[int, int, int] = (80, 175, 76)) -> np.ndarray:
    """Draw the emotion label, the intensity bar and the alert text (BGR frame).

    OpenCV's Hershey fonts cannot render emoji, so callers pass plain text.
    """
    out = frame.copy()
    h, w = out.shape[:2]
    cv2.putText(out, emotion_text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.9, (255, 255, 255), 2, cv2.LINE_AA)
    bar_w = max(0, w - 20)
    cv2.rectangle(out, (10, 42), (10 + bar_w, 52), (221, 221, 221), -1)
    fill = int(bar_w * max(0.0, min(1.0, intensity)))
    if fill > 0:
        cv2.rectangle(out, (10, 42), (10 + fill, 52), bar_color, -1)
    if alert_message:
        cv2.putText(out, alert_message, (10, h - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (79, 83, 217), 2, cv2.LINE_AA)
    return out
