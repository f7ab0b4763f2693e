"""Ed25519 signature verification for Discord interaction requests."""
from nacl.signing import VerifyKey
from nacl.exceptions import BadSignatureError


def verify(signature: bytes, message: bytes, public_key: bytes) -> bool:
    """Check an Ed25519 signature.

    Args:
        signature: Raw (decoded) signature bytes
        message: Timestamp header bytes followed by the byte-exact request body
        public_key: Raw (decoded) 32-byte public key

    Returns:
        True if the signature is valid for message under public_key.
        Malformed keys or signatures are reported as invalid, never raised.
    """
    try:
        VerifyKey(public_key).verify(message, signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False


def signed_message(timestamp: str, body: bytes) -> bytes:
    """Build the byte string Discord signs: timestamp followed by raw body.

    Header values arrive decoded as latin-1, so encoding back with latin-1
    restores the bytes that were sent.

    Raises:
        UnicodeEncodeError: if the timestamp holds characters beyond latin-1
    """
    return timestamp.encode('latin-1') + body
