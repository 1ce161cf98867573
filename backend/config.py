import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# API_KEY is accepted for older .env files
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-2.5-flash-image-preview")

WANDB_API_KEY = os.getenv("WANDB_API_KEY")

# Style catalog shared by the /styles endpoint and request validation
STYLES = [
    'Oil Painting', 'Acrylic Painting', 'Watercolor',
    'Pop Art', 'Rembrandt', 'Mondrian'
]
DEFAULT_STYLE = 'Oil Painting'

SUPPORTED_MIME_TYPES = [
    'image/png', 'image/jpeg', 'image/webp'
]

# W&B Configuration
WANDB_CONFIG = {
    'project': os.getenv("WANDB_PROJECT", "outline-color"),
    'save_code': False
}
