"""
Normalization of product image fields.

Product rows carry images in several encodings: a list of URLs, a JSON-encoded
list, a JSON-encoded single string, or a bare URL. Everything that reads a
product goes through normalize_images() so callers always get a list of URLs.
"""
import json
from typing import Any, List, Optional, Union
from urllib.parse import quote

from storefront.core.config import settings

ImageField = Union[None, str, List[Any]]


def placeholder_image(name: Optional[str] = None) -> str:
    """Placeholder URL used when a product has no usable image."""
    return f"{settings.PLACEHOLDER_IMAGE_PATH}?text={quote(name or 'Product')}"


def _parse_string(value: str) -> List[Any]:
    try:
        parsed = json.loads(value)
    except ValueError:
        # Not JSON, so it is a single URL
        return [value]

    if isinstance(parsed, list):
        return parsed
    return [parsed]


def normalize_images(value: ImageField, name: Optional[str] = None) -> List[str]:
    """
    Turn any supported image encoding into a non-empty list of URLs.

    Args:
        value: None, a URL, a JSON array string, a JSON string, or a list
        name: Product name used for the placeholder text

    Returns:
        List of image URLs, with a placeholder if nothing usable was found
    """
    if isinstance(value, str):
        candidates = _parse_string(value)
    elif isinstance(value, list):
        candidates = value
    else:
        candidates = []

    images = [str(image) for image in candidates if image and isinstance(image, str)]

    if not images:
        images = [placeholder_image(name)]

    return images
