from dataclasses import dataclass
from typing import Optional

import requests

from frontend.config import API_TIMEOUT, API_URL
from frontend.errors import InvocationFailed, NoImageReturned


@dataclass(frozen=True)
class GenerationResult:
    mime_type: str
    base64_data: str
    elapsed_ms: Optional[float] = None


class GenerationClient:
    """HTTP client for the generation backend."""

    def __init__(self, base_url=API_URL, timeout=API_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def generate_outline(self, image):
        return self._generate("/outline", {"image": image.base64_data, "mime_type": image.mime_type})

    def apply_style(self, image, style):
        return self._generate("/style", {
            "image": image.base64_data,
            "mime_type": image.mime_type,
            "style": style
        })

    def _generate(self, path, payload):
        try:
            resp = self.http.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise InvocationFailed(f"Network error: {e}") from e

        if resp.status_code == 502:
            body = self._json(resp)
            if body.get("type") == "NoImageReturned":
                raise NoImageReturned(body.get("error", "The model did not return an image"))
            raise InvocationFailed(body.get("error", f"Backend returned {resp.status_code}"))

        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            detail = self._json(resp).get("detail", "")
            raise InvocationFailed(f"{e} {detail}".strip()) from e

        data = self._json(resp)
        if not data.get("data"):
            raise NoImageReturned("Backend response did not contain image data")
        return GenerationResult(
            mime_type=data.get("mime_type", "image/png"),
            base64_data=data["data"],
            elapsed_ms=data.get("elapsed_ms"),
        )

    @staticmethod
    def _json(resp):
        try:
            body = resp.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def health(self):
        resp = self.http.get(f"{self.base_url}/health", timeout=5)
        resp.raise_for_status()
        return resp.json()

    def styles(self):
        resp = self.http.get(f"{self.base_url}/styles", timeout=5)
        resp.raise_for_status()
        return resp.json()
