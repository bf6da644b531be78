"""
Expression-vector helpers: label normalisation and dominant-emotion selection.
"""
# emocam/emotion.py
from __future__ import annotations
from typing import Dict, Mapping, Optional
import logging

from emocam.models import Emotion, ExpressionVector, DominantResult

logger = logging.getLogger(__name__)

# DeepFace emotion labels -> our enumeration
DEEPFACE_LABELS: Dict[str, Emotion] = {
    "happy": Emotion.HAPPY,
    "sad": Emotion.SAD,
    "angry": Emotion.ANGRY,
    "surprise": Emotion.SURPRISED,
    "surprised": Emotion.SURPRISED,
    "disgust": Emotion.DISGUSTED,
    "disgusted": Emotion.DISGUSTED,
    "fear": Emotion.FEARFUL,
    "fearful": Emotion.FEARFUL,
    "neutral": Emotion.NEUTRAL,
}

EMOJI_MAP: Dict[Emotion, str] = {
    Emotion.HAPPY: "😄",
    Emotion.SAD: "😢",
    Emotion.ANGRY: "😠",
    Emotion.SURPRISED: "😲",
    Emotion.DISGUSTED: "🤢",
    Emotion.FEARFUL: "😨",
    Emotion.NEUTRAL: "😐",
}
UNKNOWN_EMOJI = "🤔"


def emoji_for(emotion) -> str:
    try:
        return EMOJI_MAP[Emotion(emotion)]
    except ValueError:
        return UNKNOWN_EMOJI


def normalize_expressions(raw: Optional[Mapping], percent: bool = True) -> ExpressionVector:
    """
    Convert a detector probability dict into an ExpressionVector.

    DeepFace reports percentages (0..100) keyed by its own labels; values are
    scaled into [0, 1] and clamped. Unknown labels are dropped.
    """
    out: ExpressionVector = {}
    if not raw:
        return out
    for label, value in raw.items():
        emo = DEEPFACE_LABELS.get(str(label).strip().lower())
        if emo is None:
            logger.debug(f"[emotion] dropping unknown label {label!r}")
            continue
        try:
            p = float(value)
        except (TypeError, ValueError):
            continue
        if percent:
            p /= 100.0
        out[emo] = max(0.0, min(1.0, p))
    return out


def dominant_emotion(expressions: Optional[Mapping[Emotion, float]]) -> Optional[DominantResult]:
    """
    Pick the emotion with the highest probability.

    Ties go to the emotion declared first in `Emotion`, independent of the
    mapping's iteration order. Returns None for an empty vector.
    """
    if not expressions:
        return None
    best: Optional[Emotion] = None
    best_p = float("-inf")
    for emo in Emotion:
        if emo not in expressions:
            continue
        p = float(expressions[emo])
        if p > best_p:
            best, best_p = emo, p
    if best is None:
        return None
    return DominantResult(emotion=best, probability=best_p)
