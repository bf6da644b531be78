"""
Alert policy: a pure function of the dominant emotion and its probability.
"""
from __future__ import annotations
from typing import Optional

from emocam.models import Emotion

HAPPY_MESSAGE = "😊 You're looking happy!"
SAD_MESSAGE = "😢 You seem a bit down..."

_RULES = {
    Emotion.HAPPY: HAPPY_MESSAGE,
    Emotion.SAD: SAD_MESSAGE,
}


def alert(emotion: Optional[Emotion], probability: float, threshold: float = 0.8) -> Optional[str]:
    """Return the banner text for this tick, or None. The threshold is exclusive."""
    if emotion is None or probability <= threshold:
        return None
    return _RULES.get(Emotion(emotion))
