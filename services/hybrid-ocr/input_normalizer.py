"""Decide whether a remote document is a PDF or an image."""

import logging
import re
from urllib.parse import urlsplit

from models import InputKind

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"

IMAGE_SUBTYPES = frozenset({"jpeg", "jpg", "png", "webp", "gif", "bmp"})

_IMAGE_EXT_RE = re.compile(r"\.(jpg|jpeg|png|webp|gif|bmp)$", re.IGNORECASE)


def _locator_path(locator: str) -> str:
    """Path component of the locator, without query string or fragment."""
    try:
        path = urlsplit(locator).path
    except ValueError:
        path = locator
    return path or locator


def normalize_input(locator: str, declared_media_type: str | None = None) -> InputKind:
    """Classify the document as PDF and/or image.

    Both checks run independently; a value may satisfy neither, in which
    case the router treats it as an image.
    """
    mime_type = (declared_media_type or "").strip().lower() or DEFAULT_MEDIA_TYPE
    path = _locator_path(locator).lower()

    is_pdf = "pdf" in mime_type or path.endswith(".pdf")

    subtype = mime_type.split("/", 1)[-1]
    is_image = (
        mime_type.startswith("image/")
        or mime_type in IMAGE_SUBTYPES
        or subtype in IMAGE_SUBTYPES
        or bool(_IMAGE_EXT_RE.search(path))
    )

    logger.debug("normalized input: mime=%s is_pdf=%s is_image=%s", mime_type, is_pdf, is_image)
    return InputKind(mime_type=mime_type, is_pdf=is_pdf, is_image=is_image)
