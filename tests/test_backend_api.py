import pytest
from fastapi.testclient import TestClient

from backend.app import app, get_model_client
from backend.config import DEFAULT_STYLE, STYLES
from backend.model_client import ImageResult, InvocationFailed, NoImageReturned
from conftest import b64


class FakeModelClient:
    def __init__(self, result=None, error=None):
        self.result = result or ImageResult(mime_type="image/png", base64_data="b3V0bGluZQ==")
        self.error = error
        self.calls = []

    async def invoke(self, content):
        self.calls.append(content)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_model():
    fake = FakeModelClient()
    app.dependency_overrides[get_model_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] in ("ok", "degraded")
    assert "model" in body
    assert body["tracking"] is False


def test_styles(client):
    resp = client.get("/styles")
    assert resp.json() == {"styles": STYLES, "default": DEFAULT_STYLE}


def test_outline_returns_image(client, fake_model, png_bytes):
    resp = client.post("/outline", json={"image": b64(png_bytes), "mime_type": "image/png"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["mime_type"] == "image/png"
    assert body["data"] == "b3V0bGluZQ=="
    assert body["elapsed_ms"] >= 0

    sent = fake_model.calls[0]
    assert sent.parts[0].inline_data.data == png_bytes
    assert "coloring book page" in sent.parts[1].text


def test_outline_accepts_data_url(client, fake_model, png_bytes):
    resp = client.post("/outline", json={"image": f"data:image/png;base64,{b64(png_bytes)}"})

    assert resp.status_code == 200
    assert fake_model.calls[0].parts[0].inline_data.data == png_bytes


def test_style_embeds_style_name(client, fake_model, jpeg_bytes):
    resp = client.post("/style", json={
        "image": b64(jpeg_bytes), "mime_type": "image/jpeg", "style": "Watercolor"
    })

    assert resp.status_code == 200
    sent = fake_model.calls[0]
    assert sent.parts[0].inline_data.mime_type == "image/jpeg"
    assert "Watercolor" in sent.parts[1].text


def test_style_defaults_to_oil_painting(client, fake_model, png_bytes):
    client.post("/style", json={"image": b64(png_bytes)})
    assert "Oil Painting" in fake_model.calls[0].parts[1].text


def test_unknown_style_is_400(client, fake_model, png_bytes):
    resp = client.post("/style", json={"image": b64(png_bytes), "style": "Cubism"})
    assert resp.status_code == 400
    assert fake_model.calls == []


def test_invalid_base64_is_400(client, fake_model):
    resp = client.post("/outline", json={"image": "not base64!!"})
    assert resp.status_code == 400
    assert "Invalid base64" in resp.json()["detail"]


def test_unsupported_mime_type_is_400(client, fake_model, png_bytes):
    resp = client.post("/outline", json={"image": b64(png_bytes), "mime_type": "application/pdf"})
    assert resp.status_code == 400


@pytest.mark.parametrize("mime_type", ["image/heic", "image/heif", "image/gif"])
def test_types_the_frontend_never_sends_are_400(client, fake_model, png_bytes, mime_type):
    resp = client.post("/outline", json={"image": b64(png_bytes), "mime_type": mime_type})
    assert resp.status_code == 400
    assert fake_model.calls == []



def test_no_image_returned_is_502_with_type(client, fake_model, png_bytes):
    fake_model.error = NoImageReturned("The model did not return an image")

    resp = client.post("/outline", json={"image": b64(png_bytes)})

    assert resp.status_code == 502
    assert resp.json() == {
        "success": False,
        "error": "The model did not return an image",
        "type": "NoImageReturned"
    }


def test_invocation_failure_is_502_with_type(client, fake_model, png_bytes):
    fake_model.error = InvocationFailed("quota exceeded")

    resp = client.post("/style", json={"image": b64(png_bytes), "style": "Pop Art"})

    assert resp.status_code == 502
    assert resp.json()["type"] == "InvocationFailed"
