import base64
import io

import numpy as np
import pytest
from google.genai import types
from PIL import Image


def make_image_bytes(fmt="PNG", size=(8, 6), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


class FakeUpload(io.BytesIO):
    """Stands in for streamlit's UploadedFile."""

    def __init__(self, data, name="photo.jpg", type="image/jpeg"):
        super().__init__(data)
        self.name = name
        self.type = type


@pytest.fixture
def photo_upload(jpeg_bytes):
    return FakeUpload(jpeg_bytes, name="photo.jpg", type="image/jpeg")


def image_response(data=b"generated-png", mime_type="image/png", text=None):
    parts = []
    if text:
        parts.append(types.Part(text=text))
    parts.append(types.Part(inline_data=types.Blob(mime_type=mime_type, data=data)))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def text_only_response(text="I can't do that."):
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


class FakeGenaiClient:
    """Mimics genai.Client().aio.models.generate_content."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.aio = self
        self.models = self

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


class FakeVideoCapture:
    """Mimics cv2.VideoCapture for a device that opens (or not) and yields frames."""

    instances = []

    def __init__(self, index, opened=True, frames=None):
        self.index = index
        self.opened = opened
        self.frames = list(frames) if frames is not None else [np.full((6, 8, 3), 127, dtype=np.uint8)]
        self.released = False
        FakeVideoCapture.instances.append(self)

    def isOpened(self):
        return self.opened and not self.released

    def read(self):
        if self.released or not self.frames:
            return False, None
        frame = self.frames[0] if len(self.frames) == 1 else self.frames.pop(0)
        return True, frame

    def release(self):
        self.released = True


@pytest.fixture(autouse=True)
def reset_fake_captures():
    FakeVideoCapture.instances = []
    yield


def b64(data):
    return base64.b64encode(data).decode("utf-8")


@pytest.fixture(autouse=True)
def device_registry(monkeypatch):
    from frontend import camera
    registry = camera.DeviceRegistry()
    monkeypatch.setattr(camera, "devices", registry)
    return registry
