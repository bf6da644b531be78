"""
Error taxonomy. Every failure is handled at the boundary where it occurs.
"""


class EmoCamError(RuntimeError):
    """Base class for application errors."""


class ModelLoadError(EmoCamError):
    """A model resource could not be loaded; fatal for the session."""


class ModelsNotReadyError(EmoCamError):
    """An operation needing the models was requested before they loaded."""


class CameraError(EmoCamError):
    """The camera could not be opened. Non-fatal; the user may retry."""


class CaptureError(EmoCamError):
    """A screenshot was requested without an active stream."""
