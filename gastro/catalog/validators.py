"""
Validation for uploaded product images
"""
import base64
from io import BytesIO

from django.conf import settings
from PIL import Image, UnidentifiedImageError


class ImageValidationError(ValueError):
    pass


def validate_image_upload(uploaded_file):
    """
    Check an uploaded file is a real image within the size limit.

    Returns (base64_data, mime_type). Raises ImageValidationError otherwise.
    """
    if uploaded_file is None:
        raise ImageValidationError('No image file provided')

    max_bytes = settings.MAX_IMAGE_UPLOAD_BYTES
    if uploaded_file.size > max_bytes:
        raise ImageValidationError(f'Image exceeds the {max_bytes // (1024 * 1024)}MB limit')

    content_type = (getattr(uploaded_file, 'content_type', '') or '').lower()
    if not content_type.startswith('image/'):
        raise ImageValidationError('Only image files are allowed')

    raw = uploaded_file.read()
    try:
        with Image.open(BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ImageValidationError('File is not a valid image')

    return base64.b64encode(raw).decode('ascii'), content_type


def decode_image_data(image_data):
    return base64.b64decode(image_data)
