"""Storage key generation for uploaded media."""

import os
import uuid

from apps.api.media.validation import ALLOWED_IMAGE_TYPES


def _sanitize_owner_id(owner_id: str) -> str:
    """Drop only what cannot appear in a plain file name; the id is otherwise kept as given."""
    safe = "".join(c for c in owner_id if c not in "/\\" and c.isprintable()).lstrip(".")
    return safe or "owner"


def extension_for(original_filename: str, mime_type: str) -> str:
    """
    Pick the file extension for a stored asset.

    The original extension is kept (lower-cased) when it matches the MIME
    type, otherwise the MIME type's canonical extension is used.
    """
    allowed = ALLOWED_IMAGE_TYPES.get(mime_type.lower())
    if not allowed:
        return ""
    _, ext = os.path.splitext(original_filename or "")
    ext = ext.lower()
    return ext if ext in allowed else allowed[0]


def generate_asset_key(owner_id: str, original_filename: str, mime_type: str) -> str:
    """
    Generate a unique storage key for an asset.

    Format: <owner_id>-<32 hex chars of a random UUID4><ext>. 122 random
    bits make collisions between concurrent uploads negligible; no clock
    input is involved.

    Args:
        owner_id: Owner the asset belongs to
        original_filename: Filename supplied by the client
        mime_type: Declared MIME type

    Returns:
        Storage key (a plain file name, no path separators)
    """
    return f"{_sanitize_owner_id(owner_id)}-{uuid.uuid4().hex}{extension_for(original_filename, mime_type)}"
