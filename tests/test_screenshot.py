
import cv2
import numpy as np
import pytest

from conftest import make_frame
from emocam.errors import CaptureError
from emocam.screenshot import capture, save

def test_capture_is_lossless_at_native_size():
    frame = make_frame(w=50, h=30)
    shot = capture(frame)
    assert (shot.width, shot.height) == (50, 30)
    decoded = cv2.imdecode(np.frombuffer(shot.png, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert np.array_equal(decoded, frame)

def test_capture_rejects_missing_frame():
    with pytest.raises(CaptureError):
        capture(None)
    with pytest.raises(CaptureError):
        capture(np.zeros((0, 0, 3), dtype=np.uint8))

def test_save(tmp_path):
    path = save(capture(make_frame()), str(tmp_path / "shots"))
    assert path.endswith(".png")
    assert cv2.imread(path).shape == (48, 64, 3)
