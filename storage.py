"""Upload storage for social media post images.

Files land under UPLOAD_FOLDER and are served back by the `uploaded_file`
route, which makes the returned URL publicly resolvable.
"""

import logging
import os
from datetime import datetime

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from errors import TransportError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "social-media-posts"
ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
IMAGE_TYPE_ERROR = "Only image files (png, jpg, jpeg, gif, webp) are allowed."


def safe_name(filename):
    return secure_filename(filename) or "image"


def is_allowed_image(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def image_key(employee_code, filename, now=None):
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"{IMAGE_PREFIX}/{employee_code}/{millis}-{safe_name(filename)}"


def upload_post_image(file, employee_code, now=None):
    """Store an uploaded image and return its public URL."""
    if not file or not file.filename:
        raise ValidationError({"image": "Facebook post image is required."})
    if not is_allowed_image(file.filename):
        raise ValidationError({"image": IMAGE_TYPE_ERROR})

    key = image_key(employee_code, file.filename, now)
    path = os.path.join(current_app.config["UPLOAD_FOLDER"], *key.split("/"))
    if os.path.exists(path):
        raise TransportError(f"Upload target already exists: {key}")

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file.save(path)
    except OSError as e:
        current_app.logger.error(f"Error saving upload {key}: {e}")
        raise TransportError("Failed to upload image. Please try again.") from e

    logger.info("Stored post image %s", key)
    return url_for("uploaded_file", filename=key, _external=True)
