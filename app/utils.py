"""
Utility functions for the resume-tailor app.
"""

import base64
import hashlib


def _sha(data: str | bytes) -> str:
    """Computes SHA256 hash of a string or raw bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def to_data_url(data: bytes, mime_type: str) -> str:
    """Inline an uploaded image so it can be stored and rendered without files."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
