"""Run the desktop live emotion window.

Usage:
    uvicorn api.main:app --reload  # (separate, for the web UI)
    python scripts/live_overlay.py  # (to see the camera window)

Keys: 's' start/stop video, 'c' capture screenshot, 'q' quit.
"""
import logging

from emocam.config import Settings
from emocam.live import run_live_overlay

if __name__ == '__main__':
    s = Settings()
    logging.basicConfig(level=s.LOG_LEVEL)
    run_live_overlay(s)
