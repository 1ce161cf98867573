"""
Per-browser-session state for the app.

SessionState is an immutable snapshot; every change goes through
reduce(state, action). Session wraps the current snapshot, dispatches
actions and runs the side-effecting steps (uploads, camera, remote calls)
that produce them. The Streamlit page keeps one Session in
st.session_state and renders from session.state.
"""

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from frontend.config import (
    CAMERA_ERROR, DEFAULT_STYLE, OUTLINE_ERROR, STYLE_ERROR, STYLES, UPLOAD_ERROR
)
from frontend.errors import (
    CaptureUnavailable, IngestionFailed, InvocationFailed, NoImageReturned, OperationInProgress
)
from frontend.ingestion import ImageHandle, from_file, from_result


class Mode(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    COLORING = "coloring"


@dataclass(frozen=True)
class Attempt:
    operation: str
    style: Optional[str]
    success: bool
    error_type: Optional[str]
    elapsed_ms: float


@dataclass(frozen=True)
class SessionState:
    original: Optional[ImageHandle] = None
    generated: Optional[ImageHandle] = None
    mode: Mode = Mode.IDLE
    error: Optional[str] = None
    style: str = DEFAULT_STYLE
    camera_open: bool = False
    attempts: Tuple[Attempt, ...] = ()

    @property
    def busy(self):
        return self.mode is not Mode.IDLE

    @property
    def visible_result(self):
        # Never show a result while a call is running or an error is up
        if self.busy or self.error:
            return None
        return self.generated


# --- Actions ---

@dataclass(frozen=True)
class ImageIngested:
    image: ImageHandle


@dataclass(frozen=True)
class IngestionRejected:
    message: str


@dataclass(frozen=True)
class StyleSelected:
    style: str


@dataclass(frozen=True)
class OperationStarted:
    mode: Mode


@dataclass(frozen=True)
class OperationSucceeded:
    image: ImageHandle


@dataclass(frozen=True)
class OperationFailed:
    message: str


@dataclass(frozen=True)
class OperationSettled:
    attempt: Attempt


@dataclass(frozen=True)
class CameraOpened:
    pass


@dataclass(frozen=True)
class CameraClosed:
    pass


@dataclass(frozen=True)
class CameraFailed:
    message: str


def reduce(state: SessionState, action) -> SessionState:
    if isinstance(action, ImageIngested):
        return replace(state, original=action.image, generated=None, error=None)
    if isinstance(action, IngestionRejected):
        return replace(state, error=action.message)
    if isinstance(action, StyleSelected):
        return replace(state, style=action.style)
    if isinstance(action, OperationStarted):
        return replace(state, mode=action.mode, generated=None, error=None)
    if isinstance(action, OperationSucceeded):
        return replace(state, generated=action.image, error=None)
    if isinstance(action, OperationFailed):
        return replace(state, generated=None, error=action.message)
    if isinstance(action, OperationSettled):
        return replace(state, mode=Mode.IDLE, attempts=state.attempts + (action.attempt,))
    if isinstance(action, CameraOpened):
        return replace(state, camera_open=True, error=None)
    if isinstance(action, CameraClosed):
        return replace(state, camera_open=False)
    if isinstance(action, CameraFailed):
        return replace(state, camera_open=False, error=action.message)
    raise TypeError(f"Unknown action: {action!r}")


class Session:
    def __init__(self, state=None):
        self.state = state or SessionState()
        self._listeners = []

    def subscribe(self, listener):
        """Register listener(previous, current); returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, action):
        previous = self.state
        self.state = reduce(previous, action)
        for listener in list(self._listeners):
            listener(previous, self.state)
        return self.state

    def _ensure_idle(self):
        if self.state.busy:
            raise OperationInProgress(f"A {self.state.mode.value} request is still running")

    # --- Ingestion ---

    def ingest_file(self, file):
        self._ensure_idle()
        try:
            image = from_file(file)
        except IngestionFailed as e:
            print(f"Upload rejected: {e}")
            self.dispatch(IngestionRejected(UPLOAD_ERROR))
            raise
        self.dispatch(ImageIngested(image))
        return image

    def ingest_capture(self, image: ImageHandle):
        self._ensure_idle()
        self.dispatch(ImageIngested(image))
        return image

    def select_style(self, style):
        if style not in STYLES:
            raise ValueError(f"Unknown style: {style!r}")
        self.dispatch(StyleSelected(style))

    # --- Remote operations ---

    def generate_outline(self, client):
        return self._run(
            Mode.GENERATING, "outline", None,
            lambda image: client.generate_outline(image), OUTLINE_ERROR
        )

    def apply_style(self, client):
        style = self.state.style
        return self._run(
            Mode.COLORING, "style", style,
            lambda image: client.apply_style(image, style), STYLE_ERROR
        )

    def _run(self, mode, operation, style, call, failure_message):
        self._ensure_idle()
        image = self.state.original
        if image is None:
            return None

        self.dispatch(OperationStarted(mode))
        start_time = time.time()
        outcome = "Interrupted"
        try:
            result = call(image)
            self.dispatch(OperationSucceeded(from_result(result.mime_type, result.base64_data)))
            outcome = None
        except NoImageReturned as e:
            print(f"⚠️  {operation}: model returned no image: {e}")
            self.dispatch(OperationFailed(failure_message))
            outcome = type(e).__name__
        except InvocationFailed as e:
            print(f"❌ {operation} request failed: {e}")
            self.dispatch(OperationFailed(failure_message))
            outcome = type(e).__name__
        finally:
            self.dispatch(OperationSettled(Attempt(
                operation=operation,
                style=style,
                success=outcome is None,
                error_type=outcome,
                elapsed_ms=round((time.time() - start_time) * 1000, 2),
            )))
        return self.state.visible_result

    # --- Camera ---

    def open_camera(self, camera):
        try:
            camera.open()
        except CaptureUnavailable as e:
            print(f"Error accessing camera: {e}")
            self.dispatch(CameraFailed(CAMERA_ERROR))
            return False
        self.dispatch(CameraOpened())
        return True

    def camera_preview(self, camera):
        try:
            return camera.preview()
        except CaptureUnavailable as e:
            print(f"Camera preview failed: {e}")
            camera.close()
            self.dispatch(CameraFailed(CAMERA_ERROR))
            return None

    def capture_from_camera(self, camera):
        try:
            self._ensure_idle()
        except OperationInProgress:
            self.close_camera(camera)
            raise
        try:
            image = camera.capture()
        except CaptureUnavailable as e:
            print(f"Camera capture failed: {e}")
            self.dispatch(CameraFailed(CAMERA_ERROR))
            return None
        self.dispatch(CameraClosed())
        return self.ingest_capture(image)

    def close_camera(self, camera):
        camera.close()
        self.dispatch(CameraClosed())
