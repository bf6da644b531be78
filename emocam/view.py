"""
View layer: derives display values from a UIState snapshot. The page itself is
the Jinja2 template in `templates/index.html`.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from emocam.emotion import emoji_for
from emocam.models import ScreenshotInfo, StateResponse, UIState

TITLE = "Facial Emotion Detection"
LOADING_TEXT = "Loading AI Models... ⏳"
DETECTING_TEXT = "Detecting..."
HIGH_COLOR = "#4CAF50"
LOW_COLOR = "#FF5722"
TEMPLATE_DIR = Path(__file__).parent / "templates"


def intensity_color(intensity: float, high: float = 0.5) -> str:
    return HIGH_COLOR if intensity > high else LOW_COLOR


class ViewModel(BaseModel):
    title: str = TITLE
    loading: bool
    model_error: Optional[str] = None
    camera_error: Optional[str] = None
    video_playing: bool
    emotion_text: str
    emoji: Optional[str] = None
    bar_width: str
    bar_color: str
    alert_message: Optional[str] = None
    toggle_label: str
    screenshot_url: Optional[str] = None

    @classmethod
    def from_state(cls, state: UIState, high: float = 0.5) -> "ViewModel":
        emoji = emoji_for(state.emotion) if state.emotion else None
        if state.emotion:
            emotion_text = f"{emoji} {state.emotion.value.upper()}"
        else:
            emotion_text = DETECTING_TEXT
        return cls(
            loading=state.loading,
            model_error=state.model_error,
            camera_error=state.camera_error,
            video_playing=state.video_playing,
            emotion_text=emotion_text,
            emoji=emoji,
            bar_width=f"{state.intensity * 100:.1f}%",
            bar_color=intensity_color(state.intensity, high),
            alert_message=state.alert_message,
            toggle_label="Stop Video" if state.video_playing else "Start Video",
            screenshot_url=f"/screenshot?t={state.screenshot.captured_at}" if state.screenshot else None,
        )


def state_response(state: UIState, high: float = 0.5) -> StateResponse:
    vm = ViewModel.from_state(state, high)
    shot = None
    if state.screenshot is not None:
        shot = ScreenshotInfo(
            width=state.screenshot.width,
            height=state.screenshot.height,
            captured_at=state.screenshot.captured_at,
        )
    return StateResponse(
        loading=state.loading,
        model_error=state.model_error,
        video_playing=state.video_playing,
        camera_error=state.camera_error,
        emotion=state.emotion,
        intensity=state.intensity,
        alert_message=state.alert_message,
        screenshot=shot,
        emotion_text=vm.emotion_text,
        emoji=vm.emoji,
        bar_width=vm.bar_width,
        bar_color=vm.bar_color,
        toggle_label=vm.toggle_label,
    )

