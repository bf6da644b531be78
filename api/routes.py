"""
REST endpoints driving the emotion controller, plus the HTML view and MJPEG stream.
"""
import asyncio
import logging

import cv2
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from fastapi.templating import Jinja2Templates

from emocam.config import Settings
from emocam.controller import EmotionController
from emocam.errors import CameraError, CaptureError, ModelLoadError, ModelsNotReadyError
from emocam.models import ScreenshotInfo, StateResponse
from emocam.view import LOADING_TEXT, TEMPLATE_DIR, ViewModel, state_response

router = APIRouter()
settings = Settings()
controller = EmotionController(settings)
logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    vm = ViewModel.from_state(controller.snapshot(), settings.INTENSITY_HIGH)
    return templates.TemplateResponse(request, "index.html", {"vm": vm, "loading_text": LOADING_TEXT})


@router.get("/state", response_model=StateResponse)
async def get_state():
    return state_response(controller.snapshot(), settings.INTENSITY_HIGH)


@router.post("/video/start")
async def video_start():
    """
    Open the camera and begin detection.

    Returns:
        {"status": "started"} or {"status": "already_running"}
    """
    try:
        started = await controller.start_video()
    except (ModelsNotReadyError, ModelLoadError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CameraError as e:
        logger.warning(f"[api] /video/start camera error: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "started" if started else "already_running"}


@router.post("/video/stop")
async def video_stop():
    stopped = await controller.stop_video()
    return {"status": "stopped" if stopped else "not_running"}


@router.post("/screenshot", response_model=ScreenshotInfo)
async def take_screenshot():
    try:
        shot = controller.capture()
    except CaptureError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ScreenshotInfo(width=shot.width, height=shot.height, captured_at=shot.captured_at)


@router.get("/screenshot")
async def get_screenshot():
    shot = controller.snapshot().screenshot
    if shot is None:
        raise HTTPException(status_code=404, detail="No screenshot captured")
    return Response(content=shot.png, media_type="image/png")


async def _mjpeg_frames():
    delay = 1.0 / max(1.0, settings.STREAM_FPS)
    while controller.playing:
        frame = controller.render_frame()
        if frame is None:
            await asyncio.sleep(delay)
            continue
        ok, buf = cv2.imencode(".jpg", frame)
        if ok:
            yield (b"--frame\r\nContent-Type: image/jpeg\r\n\r\n" + buf.tobytes() + b"\r\n")
        await asyncio.sleep(delay)


@router.get("/stream")
async def stream():
    if not controller.playing:
        raise HTTPException(status_code=409, detail="Video is not playing")
    return StreamingResponse(_mjpeg_frames(), media_type="multipart/x-mixed-replace; boundary=frame")
