"""Builds the generative request sent to the image model."""

from google.genai import types

from backend.config import STYLES

OUTLINE = "outline"
STYLE = "style"

OUTLINE_PROMPT = (
    "Extract the line art from this image to create a coloring book page. "
    "The background must be pure white and the lines should be bold and black. "
    "Do not add any color or shading."
)
STYLE_PROMPT = "Recreate this image in the style of a vibrant {style}."


def instruction_for(operation, style=None):
    """Return the instruction text for an operation."""
    if operation == OUTLINE:
        return OUTLINE_PROMPT
    if operation == STYLE:
        if style not in STYLES:
            raise ValueError(f"Unknown style: {style!r}. Choose one of {', '.join(STYLES)}")
        return STYLE_PROMPT.format(style=style)
    raise ValueError(f"Unknown operation: {operation!r}")


def build_request(image_bytes: bytes, mime_type: str, operation: str, style: str = None) -> types.Content:
    """
    Compose the model request: one inline image part followed by one
    text instruction part, wrapped in a single user turn.
    """
    prompt = instruction_for(operation, style)
    return types.Content(
        role="user",
        parts=[
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            types.Part.from_text(text=prompt),
        ],
    )
