import base64
import io
from datetime import datetime

import wandb
from PIL import Image

from backend.config import MODEL_NAME, WANDB_API_KEY, WANDB_CONFIG

wandb_enabled = False


def init_wandb():
    """Start a W&B run for this backend process if an API key is configured."""
    global wandb_enabled
    if not WANDB_API_KEY:
        print("ℹ️  WANDB_API_KEY not set. W&B tracking disabled.")
        return False
    try:
        wandb.login(key=WANDB_API_KEY)
        wandb.init(
            project=WANDB_CONFIG['project'],
            name=f"backend-{datetime.now().strftime('%Y%m%d')}",
            save_code=WANDB_CONFIG['save_code'],
            config={
                "model": MODEL_NAME,
                "framework": "google-genai",
                "response_modalities": ["IMAGE", "TEXT"]
            }
        )
        wandb_enabled = True
        print("✅ W&B tracking enabled")
    except Exception as e:
        print(f"⚠️  W&B initialization failed: {e}")
        print("Continuing without W&B tracking...")
    return wandb_enabled


def finish_wandb():
    global wandb_enabled
    if wandb_enabled:
        wandb.finish()
        wandb_enabled = False


def log_generation(operation, style, mime_type, duration, result=None, error=None):
    """Log one generation attempt to W&B."""
    if not wandb_enabled:
        return

    try:
        log_data = {
            "operation": operation,
            "style": style or "",
            "model": MODEL_NAME,
            "input_mime_type": mime_type,
            "inference_time_ms": duration * 1000,
            "success": error is None,
            "timestamp": datetime.now().isoformat()
        }

        if error is not None:
            log_data["error_type"] = type(error).__name__
            log_data["error"] = str(error)
        elif result is not None:
            img = Image.open(io.BytesIO(base64.b64decode(result.base64_data)))
            log_data["output_mime_type"] = result.mime_type
            log_data["output_size"] = f"{img.width}x{img.height}"
            log_data["image"] = wandb.Image(img, caption=f"{operation} - {style or 'outline'}")

        wandb.log(log_data)
        print(f"📊 Logged to W&B: {operation} - {duration*1000:.2f}ms")
    except Exception as e:
        print(f"⚠️  W&B logging error: {e}")
