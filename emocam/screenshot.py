"""
Screenshot capture: rasterise the current video frame as a lossless PNG.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging
import time

import cv2
import numpy as np

from emocam.errors import CaptureError
from emocam.models import Screenshot

logger = logging.getLogger(__name__)


def capture(frame: Optional[np.ndarray]) -> Screenshot:
    """
    Encode `frame` (BGR, native resolution) as PNG.

    Raises:
        CaptureError: no frame, or an empty frame.
    """
    if frame is None or frame.size == 0 or frame.shape[0] == 0 or frame.shape[1] == 0:
        raise CaptureError("No active video stream to capture")
    ok, buf = cv2.imencode(".png", frame)
    if not ok:
        raise CaptureError("PNG encoding failed")
    h, w = frame.shape[:2]
    logger.debug(f"[screenshot] captured {w}x{h} bytes={buf.size}")
    return Screenshot(width=int(w), height=int(h), png=buf.tobytes())


def save(shot: Screenshot, out_dir: str) -> str:
    """Write a screenshot to `out_dir` and return its path."""
    path = Path(out_dir)
    path.mkdir(parents=True, exist_ok=True)
    stamp = time.strftime("%Y%m%d-%H%M%S", time.localtime(shot.captured_at))
    target = path / f"screenshot_{stamp}_{int(shot.captured_at * 1000) % 1000:03d}.png"
    target.write_bytes(shot.png)
    return str(target)
