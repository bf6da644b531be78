import time
import pytest
import numpy as np

import emocam.camera as camera
from emocam.config import Settings
from emocam.models import Box, Detection, Emotion

FRAME_W, FRAME_H = 64, 48


def make_frame(w=FRAME_W, h=FRAME_H):
    frame = np.zeros((h, w, 3), dtype=np.uint8)
    frame[:, :, 1] = 120
    frame[h // 4: h // 2, w // 4: w // 2] = 200
    return frame


def make_detection(expressions, w=FRAME_W, h=FRAME_H, box=(16, 12, 24, 20), score=0.93):
    x, y, bw, bh = box
    return Detection(
        box=Box(x=x, y=y, w=bw, h=bh),
        score=score,
        expressions={Emotion(k): v for k, v in expressions.items()},
        frame_width=w,
        frame_height=h,
    )


class FakeDetector:
    """Stands in for DeepFaceDetector: scripted results, optional latency."""
    def __init__(self, results=None, delay=0.0, fail_on=None):
        self.results = list(results or [])
        self.delay = delay
        self.fail_on = fail_on
        self.loaded = []
        self.calls = 0
        self.active = 0
        self.peak = 0

    def load_resource(self, name, path):
        if name == self.fail_on:
            raise RuntimeError("weights not found")
        self.loaded.append((name, path))

    def detect(self, frame):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if not self.results:
                return None
            r = self.results[min(self.calls - 1, len(self.results) - 1)]
            if isinstance(r, Exception):
                raise r
            return r
        finally:
            self.active -= 1


class DummyCap:
    def __init__(self, idx=0, opened=True, frame=None):
        self.idx = idx
        self.opened = opened
        self.frame = make_frame() if frame is None else frame
        self.released = False
        self.reads = 0

    def isOpened(self):
        return self.opened and not self.released

    def read(self):
        self.reads += 1
        if self.released:
            return False, None
        return True, self.frame.copy()

    def release(self):
        self.released = True


@pytest.fixture
def settings():
    s = Settings(DETECTION_INTERVAL=0.01, MIN_FACE_SIZE=10)
    return s


@pytest.fixture
def caps(monkeypatch):
    """Patch cv2.VideoCapture; returns the list of opened dummy captures."""
    opened = []

    def factory(idx):
        cap = DummyCap(idx)
        opened.append(cap)
        return cap

    monkeypatch.setattr(camera.cv2, "VideoCapture", factory)
    return opened


@pytest.fixture
def happy():
    return make_detection({"happy": 0.9, "sad": 0.02, "neutral": 0.08})
