import base64
from dataclasses import dataclass

from google import genai
from google.genai import types
from google.genai.types import Modality

from backend.config import GEMINI_API_KEY, MODEL_NAME


class InvocationFailed(Exception):
    """The model call itself failed (transport, auth, quota...)."""


class NoImageReturned(Exception):
    """The model answered but its response carried no image part."""


@dataclass(frozen=True)
class ImageResult:
    mime_type: str
    base64_data: str

    @property
    def data_url(self):
        return f"data:{self.mime_type};base64,{self.base64_data}"


def first_image_part(response):
    """Return the first part with inline image data, or None."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        if part.inline_data and part.inline_data.data:
            return part
    return None


def describe_empty_response(response):
    """Collect whatever the model said instead of an image, for diagnostics."""
    details = []
    feedback = getattr(response, "prompt_feedback", None)
    if feedback and feedback.block_reason:
        details.append(f"block_reason={feedback.block_reason}")
    candidates = getattr(response, "candidates", None) or []
    if candidates:
        if candidates[0].finish_reason:
            details.append(f"finish_reason={candidates[0].finish_reason}")
        content = candidates[0].content
        texts = [p.text for p in (content.parts or []) if p.text] if content else []
        if texts:
            details.append(f"text={' '.join(texts)[:200]!r}")
    return ", ".join(details) or "empty response"


class ImageModelClient:
    def __init__(self, client=None, model=MODEL_NAME):
        self.client = client or genai.Client(api_key=GEMINI_API_KEY)
        self.model = model
        self.config = types.GenerateContentConfig(
            response_modalities=[Modality.IMAGE, Modality.TEXT],
        )

    async def invoke(self, content: types.Content) -> ImageResult:
        """Send one request to the model. Single attempt, no retry."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=content,
                config=self.config,
            )
        except Exception as e:
            print(f"❌ Model call failed: {type(e).__name__}: {e}")
            raise InvocationFailed(str(e)) from e

        part = first_image_part(response)
        if part is None:
            reason = describe_empty_response(response)
            print(f"⚠️  Model response did not contain an image part: {reason}")
            raise NoImageReturned(f"The model did not return an image ({reason})")

        mime_type = part.inline_data.mime_type or "image/png"
        data = base64.b64encode(part.inline_data.data).decode("utf-8")
        return ImageResult(mime_type=mime_type, base64_data=data)
