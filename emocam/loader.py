"""
Model loader: fetches the two named model resources once per session.
"""
# emocam/loader.py
from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Tuple
import asyncio
import logging

from emocam.config import Settings
from emocam.errors import ModelLoadError, ModelsNotReadyError
from emocam.models import ModelStatus

logger = logging.getLogger(__name__)


class ModelLoader:
    """
    Loads the face detector and expression models through `detector`.

    Status goes loading -> ready or loading -> failed, exactly once. A failure
    is terminal: the error message is kept and surfaced, never retried.
    """
    def __init__(self, settings: Settings, detector):
        self.s = settings
        self.detector = detector
        self.status: ModelStatus = "loading"
        self.error: Optional[str] = None
        self._attempted = False
        self._task: Optional[asyncio.Task] = None

    def resources(self) -> List[Tuple[str, str]]:
        base = Path(self.s.MODEL_BASE_PATH)
        return [
            (self.s.DETECTOR_MODEL, str(base / self.s.DETECTOR_MODEL)),
            (self.s.EXPRESSION_MODEL, str(base / self.s.EXPRESSION_MODEL)),
        ]

    @property
    def ready(self) -> bool:
        return self.status == "ready"

    def load_blocking(self) -> ModelStatus:
        """Load every resource in order; later calls return the first outcome."""
        if self._attempted:
            return self.status
        self._attempted = True
        for name, path in self.resources():
            logger.info(f"[loader] loading {name} from {path}")
            try:
                self.detector.load_resource(name, path)
            except Exception as e:
                logger.exception(f"[loader] failed to load {name}")
                self.error = f"Failed to load {name}: {e}"
                self.status = "failed"
                return self.status
        self.status = "ready"
        logger.info("[loader] models ready")
        return self.status

    async def load(self) -> ModelStatus:
        """Run `load_blocking` off the event loop; concurrent callers share one attempt."""
        if self._attempted and (self._task is None or self._task.done()):
            return self.status
        if self._task is None:
            self._task = asyncio.ensure_future(asyncio.to_thread(self.load_blocking))
        await asyncio.shield(self._task)
        return self.status

    def require_ready(self) -> None:
        if self.status == "failed":
            raise ModelLoadError(self.error or "Model loading failed")
        if self.status != "ready":
            raise ModelsNotReadyError("Models are still loading")
