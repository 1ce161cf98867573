import base64
import binascii
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backend import tracking
from backend.config import DEFAULT_STYLE, GEMINI_API_KEY, MODEL_NAME, STYLES, SUPPORTED_MIME_TYPES
from backend.model_client import ImageModelClient, InvocationFailed, NoImageReturned
from backend.prompts import OUTLINE, STYLE, build_request


@asynccontextmanager
async def lifespan(app: FastAPI):
    print(f"Model: {MODEL_NAME}")
    tracking.init_wandb()
    yield
    tracking.finish_wandb()


app = FastAPI(
    title="OutlineColor API",
    version="1.0.0",
    description="Coloring-page outlines and artistic style transfer backed by a generative image model",
    lifespan=lifespan,
)

# Allow CORS from frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class OutlineRequest(BaseModel):
    image: str
    mime_type: str = "image/png"


class StyleRequest(OutlineRequest):
    style: str = DEFAULT_STYLE


_model_client = None


def get_model_client():
    global _model_client
    if _model_client is None:
        if not GEMINI_API_KEY:
            raise HTTPException(
                status_code=503,
                detail="GEMINI_API_KEY not set. Please contact administrator."
            )
        _model_client = ImageModelClient()
    return _model_client


@app.exception_handler(InvocationFailed)
@app.exception_handler(NoImageReturned)
async def generation_error_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=502,
        content={
            "success": False,
            "error": str(exc),
            "type": type(exc).__name__
        },
    )


def decode_image(image: str, mime_type: str) -> bytes:
    """Decode a base64 image, with or without a data URL prefix."""
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported mime type: {mime_type}")

    image_b64 = image.split(",")[-1] if "," in image else image
    try:
        image_bytes = base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid base64 encoding: {e}")

    if not image_bytes:
        raise HTTPException(status_code=400, detail="Empty image received")
    return image_bytes


async def run_generation(operation, payload, model_client, style=None):
    image_bytes = decode_image(payload.image, payload.mime_type)
    try:
        content = build_request(image_bytes, payload.mime_type, operation, style)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    start_time = time.time()
    try:
        result = await model_client.invoke(content)
    except (InvocationFailed, NoImageReturned) as e:
        tracking.log_generation(operation, style, payload.mime_type, time.time() - start_time, error=e)
        raise
    duration = time.time() - start_time

    tracking.log_generation(operation, style, payload.mime_type, duration, result=result)
    print(f"✅ {operation} completed in {duration*1000:.0f}ms ({result.mime_type})")

    return {
        "success": True,
        "mime_type": result.mime_type,
        "data": result.base64_data,
        "elapsed_ms": round(duration * 1000, 2),
    }


@app.post("/outline")
async def generate_outline(payload: OutlineRequest, model_client=Depends(get_model_client)):
    """Extract coloring-book line art from the image."""
    return await run_generation(OUTLINE, payload, model_client)


@app.post("/style")
async def apply_style(payload: StyleRequest, model_client=Depends(get_model_client)):
    """Recreate the image in one of the catalog styles."""
    return await run_generation(STYLE, payload, model_client, style=payload.style)


@app.get("/styles")
def list_styles():
    return {"styles": STYLES, "default": DEFAULT_STYLE}


@app.get("/health")
def health_check():
    return {
        "status": "ok" if GEMINI_API_KEY else "degraded",
        "model": MODEL_NAME,
        "tracking": tracking.wandb_enabled
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
