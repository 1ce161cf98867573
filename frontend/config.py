import os
import dotenv

dotenv.load_dotenv('.env')
API_URL = os.environ.get('API_URL', 'http://localhost:8000')

# No timeout unless one is configured; the user re-triggers on failure
API_TIMEOUT = float(os.environ['API_TIMEOUT']) if os.environ.get('API_TIMEOUT') else None
CAMERA_INDEX = int(os.environ.get('CAMERA_INDEX', '0'))

STYLES = [
    'Oil Painting', 'Acrylic Painting', 'Watercolor',
    'Pop Art', 'Rembrandt', 'Mondrian'
]
DEFAULT_STYLE = 'Oil Painting'

DOWNLOAD_BASENAME = "outline-color-art"

# User-facing messages
OUTLINE_ERROR = "Failed to generate outline. Please try again."
STYLE_ERROR = "Failed to apply coloring style. Please try again."
CAMERA_ERROR = "Could not access camera. Please check permissions."
UPLOAD_ERROR = "Could not read the selected file. Please choose an image."

# Must match SUPPORTED_MIME_TYPES in backend/config.py
UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp"]
SUPPORTED_MIME_TYPES = ["image/png", "image/jpeg", "image/webp"]
