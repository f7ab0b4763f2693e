"""Shared fixtures."""
import json
import os

# Keep the tracer provider local: no Cloud Trace exporter during tests
os.environ.setdefault('LOCAL_DEV', '1')

import pytest  # noqa: E402
from nacl.signing import SigningKey  # noqa: E402


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def public_key_hex(signing_key: SigningKey) -> str:
    return signing_key.verify_key.encode().hex()


@pytest.fixture
def sign(signing_key: SigningKey):
    """Return a function producing signed Discord headers for a body."""
    def _sign(body: bytes, timestamp: str = '1700000000') -> dict:
        signature = signing_key.sign(timestamp.encode('latin-1') + body).signature
        return {
            'X-Signature-Ed25519': signature.hex(),
            'X-Signature-Timestamp': timestamp,
        }
    return _sign


@pytest.fixture
def encode():
    def _encode(payload) -> bytes:
        return json.dumps(payload).encode()
    return _encode
