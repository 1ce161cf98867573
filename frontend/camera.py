import threading
import weakref

import cv2
import numpy as np

from frontend.config import CAMERA_ERROR, CAMERA_INDEX
from frontend.errors import CaptureUnavailable
from frontend.ingestion import from_capture


class DeviceRegistry:
    """
    Process-wide record of which CameraSession holds each device index.
    Owners are held by weak reference, so a session dropped by Streamlit
    without close() does not keep the device claimed.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._owners = {}

    def claim(self, device_index, owner):
        with self._lock:
            ref = self._owners.get(device_index)
            current = ref() if ref is not None else None
            if current is not None and current is not owner:
                return False
            self._owners[device_index] = weakref.ref(owner)
            return True

    def release(self, device_index, owner):
        with self._lock:
            ref = self._owners.get(device_index)
            if ref is not None and ref() in (owner, None):
                del self._owners[device_index]

    def owner(self, device_index):
        with self._lock:
            ref = self._owners.get(device_index)
            return ref() if ref is not None else None


devices = DeviceRegistry()


class CameraSession:
    """
    Owns one video capture device. The device is held only between open()
    and close(); capture() and read failures always release it. Only one
    session per process may hold a given device index.
    """

    def __init__(self, device_index=CAMERA_INDEX, capture_factory=cv2.VideoCapture, registry=None):
        self.device_index = device_index
        self._capture_factory = capture_factory
        self._registry = registry or devices
        self._capture = None

    @property
    def active(self):
        return self._capture is not None

    def open(self):
        if self.active:
            return
        if not self._registry.claim(self.device_index, self):
            print(f"Camera {self.device_index} is already in use by another session")
            raise CaptureUnavailable(CAMERA_ERROR)

        capture = None
        try:
            capture = self._capture_factory(self.device_index)
            opened = capture.isOpened()
        except cv2.error as e:
            print(f"Error accessing camera {self.device_index}: {e}")
            opened = False
        if not opened:
            if capture is not None:
                capture.release()
            self._registry.release(self.device_index, self)
            raise CaptureUnavailable(CAMERA_ERROR)
        self._capture = capture

    def _read_frame(self) -> np.ndarray:
        if not self.active:
            raise CaptureUnavailable("Camera is not open")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            self.close()
            raise CaptureUnavailable(CAMERA_ERROR)
        return frame

    def preview(self) -> np.ndarray:
        """Current frame as RGB, for display."""
        return cv2.cvtColor(self._read_frame(), cv2.COLOR_BGR2RGB)

    def capture(self):
        """Grab the current frame at native resolution as a PNG ImageHandle."""
        try:
            frame = self._read_frame()
            ok, buffer = cv2.imencode(".png", frame)
            if not ok:
                raise CaptureUnavailable("Could not encode camera frame")
            return from_capture(buffer.tobytes(), "image/png")
        finally:
            self.close()

    def close(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            self._registry.release(self.device_index, self)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        # Browser session ended without closing the camera
        if getattr(self, "_capture", None) is None:
            return
        self.close()
