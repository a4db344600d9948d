import secrets
import string
import time

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status


def to_object_id(value: str, label: str = "product ID") -> ObjectId:
    """Convert a string id to ObjectId, raising 400 if it is malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label}"
        )


def generate_order_number() -> str:
    """Order number in the form DVZ-<epoch ms>-<9 uppercase alphanumerics>."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(9))
    return f"DVZ-{int(time.time() * 1000)}-{suffix}"

