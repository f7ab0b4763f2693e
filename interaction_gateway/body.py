"""Raw request body capture.

Signature verification needs the request body byte-for-byte as received.
The body is captured once, before anything parses it, and stored in the
WSGI environ so later steps read the exact same bytes.
"""
from typing import Optional

RAW_BODY_KEY = 'interaction_gateway.raw_body'


def capture_raw_body(request) -> bytes:
    """Read and store the raw body of a Flask/Werkzeug request.

    `cache=True` keeps the bytes available to `request.get_json()` afterwards.
    """
    if RAW_BODY_KEY not in request.environ:
        request.environ[RAW_BODY_KEY] = request.get_data(cache=True)
    return request.environ[RAW_BODY_KEY]


def get_raw_body(request) -> Optional[bytes]:
    """Return the captured raw body, or None if it was never captured."""
    return request.environ.get(RAW_BODY_KEY)
