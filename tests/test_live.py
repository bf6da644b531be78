
import numpy as np
import emocam.live as live
from conftest import FakeDetector
from emocam.config import Settings
from emocam.models import Emotion, UIState


def test_render_window_frame_states():
    s = Settings()
    loading = live.render_window_frame(None, UIState(), s)
    assert loading.shape == (480, 640, 3) and loading.any()

    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    failed = live.render_window_frame(frame, UIState(loading=False, model_error="boom"), s)
    assert failed.shape == frame.shape

    playing = UIState(loading=False, video_playing=True, emotion=Emotion.HAPPY, intensity=0.9,
                      alert_message="😊 You're looking happy!")
    out = live.render_window_frame(frame, playing, s)
    assert out.shape == frame.shape and out.any()
    assert not frame.any()

def test_run_live_overlay_keys(monkeypatch, caps, happy, tmp_path):
    keys = [-1] * 10 + [ord('s')] + [-1] * 5 + [ord('c'), ord('q')]
    shown = {'n': 0}

    def fake_imshow(name, img):
        shown['n'] += 1

    monkeypatch.setattr(live.cv2, 'imshow', fake_imshow)
    monkeypatch.setattr(live.cv2, 'waitKey', lambda delay: keys.pop(0) if keys else ord('q'))
    monkeypatch.setattr(live.cv2, 'destroyAllWindows', lambda: None)

    s = Settings(DETECTION_INTERVAL=0.01, STREAM_FPS=200, SCREENSHOT_DIR=str(tmp_path))
    live.run_live_overlay(s, camera_index=0, detector=FakeDetector([happy]))

    assert shown['n'] >= 17
    assert len(caps) == 1 and caps[0].released
    assert len(list(tmp_path.glob("screenshot_*.png"))) == 1

def test_camera_index_override_leaves_settings_untouched(monkeypatch):
    seen = {}

    async def fake_run_window(controller):
        seen['index'] = controller.s.CAMERA_INDEX

    monkeypatch.setattr(live, '_run_window', fake_run_window)
    s = Settings(CAMERA_INDEX=0)
    live.run_live_overlay(s, camera_index=1, detector=FakeDetector())
    assert seen['index'] == 1
    assert s.CAMERA_INDEX == 0
