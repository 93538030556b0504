"""
Byte and character codecs used to carry header and body content safely.

    b64      Base64 encoder (Authorization: Basic credentials)
    percent  Percent-encoding and form bodies
"""

from . import b64, percent

__all__ = [
    "b64",
    "percent",
]
