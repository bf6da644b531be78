"""
Camera controller and the video sink the stream is bound to.
"""
# emocam/camera.py
from __future__ import annotations
from typing import Callable, List, Optional
import logging
import threading
import time

import cv2
import numpy as np

from emocam.config import Settings
from emocam.errors import CameraError

logger = logging.getLogger(__name__)


class VideoSink:
    """
    Holds the bound capture and the most recent frame.

    A background reader thread owns every `cap.read()` call and publishes the
    latest frame, so callers on the event loop never block on the device.
    Listeners registered with `on_play` fire each time a stream is bound.
    """
    READ_IDLE_SEC = 0.01

    def __init__(self):
        self._cap = None
        self._frame: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self._has_frame = threading.Event()
        self._reader: Optional[threading.Thread] = None
        self._play_listeners: List[Callable[[], None]] = []

    def on_play(self, fn: Callable[[], None]) -> None:
        self._play_listeners.append(fn)

    @property
    def bound(self) -> bool:
        return self._cap is not None

    def bind(self, cap) -> None:
        with self._lock:
            self._cap = cap
            self._frame = None
        self._has_frame.clear()
        self._reader = threading.Thread(target=self._read_loop, args=(cap,), daemon=True)
        self._reader.start()
        for fn in list(self._play_listeners):
            fn()

    def unbind(self):
        """Detach the capture; returns once the reader thread no longer touches it."""
        with self._lock:
            cap, self._cap = self._cap, None
            self._frame = None
        self._has_frame.clear()
        reader, self._reader = self._reader, None
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=2.0)
        return cap

    def _read_loop(self, cap) -> None:
        while self._cap is cap:
            try:
                ok, frame = cap.read()
            except Exception:
                logger.exception("[camera] frame read failed")
                ok, frame = False, None
            if ok and frame is not None and frame.size > 0:
                with self._lock:
                    if self._cap is not cap:
                        break
                    self._frame = frame
                self._has_frame.set()
            time.sleep(self.READ_IDLE_SEC)

    def read(self) -> Optional[np.ndarray]:
        """Latest published frame; None when unbound or the device has no data yet."""
        with self._lock:
            return self._frame

    def wait_for_frame(self, timeout: float = 1.0) -> Optional[np.ndarray]:
        """Block until the first frame of the bound stream arrives (or timeout)."""
        self._has_frame.wait(timeout)
        return self.read()

    @property
    def frame(self) -> Optional[np.ndarray]:
        return self.read()

    @property
    def ready(self) -> bool:
        return self._cap is not None and self.read() is not None

    @property
    def width(self) -> int:
        frame = self.read()
        return int(frame.shape[1]) if frame is not None else 0

    @property
    def height(self) -> int:
        frame = self.read()
        return int(frame.shape[0]) if frame is not None else 0


class CameraController:
    """Acquires and releases the webcam (video only) and binds it to the sink."""
    def __init__(self, settings: Settings, sink: VideoSink):
        self.s = settings
        self.sink = sink

    @property
    def playing(self) -> bool:
        return self.sink.bound

    @property
    def active_tracks(self) -> int:
        return 1 if self.sink.bound else 0

    def start(self, camera_index: int | None = None) -> None:
        if self.playing:
            return
        cam_idx = self.s.CAMERA_INDEX if camera_index is None else camera_index
        logger.debug(f"[camera] opening camera index {cam_idx}")
        try:
            cap = cv2.VideoCapture(cam_idx)
        except Exception as e:
            raise CameraError(f"Error accessing webcam: {e}") from e
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Could not open camera index {cam_idx}")
        self.sink.bind(cap)
        logger.info(f"[camera] camera {cam_idx} started")

    def stop(self) -> None:
        cap = self.sink.unbind()
        if cap is None:
            return
        try:
            cap.release()
        except Exception:
            logger.exception("[camera] release failed")
        logger.info("[camera] camera stopped")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.stop()
