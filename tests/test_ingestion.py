import pytest

from backend.config import SUPPORTED_MIME_TYPES as BACKEND_MIME_TYPES
from frontend.config import SUPPORTED_MIME_TYPES
from frontend.errors import IngestionFailed
from frontend.ingestion import (
    ImageHandle, download_name, from_capture, from_file, from_result
)
from conftest import FakeUpload, b64, make_image_bytes


def test_from_file_keeps_declared_type_and_source(photo_upload, jpeg_bytes):
    handle = from_file(photo_upload)

    assert handle.mime_type == "image/jpeg"
    assert handle.data_url == f"data:image/jpeg;base64,{b64(jpeg_bytes)}"
    assert handle.source_file is photo_upload
    assert handle.to_bytes() == jpeg_bytes


def test_from_file_detects_type_when_not_declared(png_bytes):
    handle = from_file(FakeUpload(png_bytes, name="image", type=None))
    assert handle.mime_type == "image/png"


def test_from_file_rejects_non_image():
    with pytest.raises(IngestionFailed):
        from_file(FakeUpload(b"%PDF-1.4 not an image", name="doc.pdf", type="application/pdf"))


def test_from_file_rejects_types_the_backend_does_not_accept():
    gif = make_image_bytes("GIF")
    with pytest.raises(IngestionFailed, match="image/gif"):
        from_file(FakeUpload(gif, name="anim.gif", type="image/gif"))
    with pytest.raises(IngestionFailed, match="image/gif"):
        from_file(FakeUpload(gif, name="anim", type=None))


def test_upload_types_match_backend():
    assert SUPPORTED_MIME_TYPES == BACKEND_MIME_TYPES



def test_from_file_rejects_empty_file():
    with pytest.raises(IngestionFailed, match="Empty"):
        from_file(FakeUpload(b""))


def test_from_file_propagates_read_errors():
    class BrokenFile:
        name = "broken.png"
        type = "image/png"

        def read(self):
            raise OSError("disk gone")

    with pytest.raises(IngestionFailed, match="disk gone"):
        from_file(BrokenFile())


def test_from_capture_has_no_source_file(png_bytes):
    handle = from_capture(png_bytes)

    assert handle.mime_type == "image/png"
    assert handle.source_file is None
    assert handle.base64_data == b64(png_bytes)


def test_handles_are_immutable(png_bytes):
    handle = from_capture(png_bytes)
    with pytest.raises(AttributeError):
        handle.mime_type = "image/jpeg"


def test_from_result_builds_data_url():
    handle = from_result("image/png", "PGI2ND4=")
    assert handle == ImageHandle(data_url="data:image/png;base64,PGI2ND4=", mime_type="image/png")


@pytest.mark.parametrize("mime_type, expected", [
    ("image/png", "outline-color-art.png"),
    ("image/jpeg", "outline-color-art.jpg"),
])
def test_download_name(mime_type, expected):
    assert download_name(from_result(mime_type, "AA==")) == expected
