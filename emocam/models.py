"""
Pydantic data models shared by the controller, the views and the API.
"""
from __future__ import annotations
import time
from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, Optional, Literal

class Emotion(str, Enum):
    # Declaration order is the tie-break order for dominant selection.
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    SURPRISED = "surprised"
    DISGUSTED = "disgusted"
    FEARFUL = "fearful"
    NEUTRAL = "neutral"


ExpressionVector = Dict[Emotion, float]


class Box(BaseModel):
    x: int
    y: int
    w: int
    h: int


class Detection(BaseModel):
    """One face found by the external detector, in frame pixel coordinates."""
    box: Box
    score: float = 1.0
    expressions: ExpressionVector = Field(default_factory=dict)
    frame_width: int
    frame_height: int

    def resize(self, width: int, height: int) -> "Detection":
        """Scale the box from the frame geometry to a display of `width` x `height`."""
        sx = width / float(self.frame_width or 1)
        sy = height / float(self.frame_height or 1)
        box = Box(
            x=int(round(self.box.x * sx)),
            y=int(round(self.box.y * sy)),
            w=int(round(self.box.w * sx)),
            h=int(round(self.box.h * sy)),
        )
        return self.model_copy(update={"box": box, "frame_width": width, "frame_height": height})


class DominantResult(BaseModel):
    emotion: Emotion
    probability: float


class Screenshot(BaseModel):
    width: int
    height: int
    png: bytes = Field(repr=False)
    captured_at: float = Field(default_factory=time.time)


class ScreenshotInfo(BaseModel):
    width: int
    height: int
    captured_at: float
    url: str = "/screenshot"


ModelStatus = Literal["loading", "ready", "failed"]


class UIState(BaseModel, frozen=True):
    loading: bool = True
    model_error: Optional[str] = None
    video_playing: bool = False
    camera_error: Optional[str] = None
    emotion: Optional[Emotion] = None
    intensity: float = 0.0
    alert_message: Optional[str] = None
    screenshot: Optional[Screenshot] = None


class StateResponse(BaseModel):
    loading: bool
    model_error: Optional[str] = None
    video_playing: bool
    camera_error: Optional[str] = None
    emotion: Optional[Emotion] = None
    intensity: float
    alert_message: Optional[str] = None
    screenshot: Optional[ScreenshotInfo] = None
    emotion_text: str
    emoji: Optional[str] = None
    bar_width: str
    bar_color: str
    toggle_label: str
