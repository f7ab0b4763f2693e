"""Authentication of inbound Discord interaction requests.

Every request must be authenticated before its body is parsed as an
interaction. The checks run in a fixed order and the first failure wins:

1. public key configured and valid hex   -> ServerMisconfigured(NO_PUBLIC_KEY)
2. raw body captured by the host          -> ServerMisconfigured(NO_RAW_BODY)
3. both security headers present          -> Unauthorized(MISSING_HEADERS)
4. signature header is valid hex          -> Unauthorized(MISSING_HEADERS)
5. Ed25519 signature matches              -> Unauthorized(INVALID_SIGNATURE)
"""
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .observability import init_observability, traced_function
from .signature import signed_message, verify

logger, _ = init_observability('discord-interactions-auth')

SIGNATURE_HEADER = 'X-Signature-Ed25519'
TIMESTAMP_HEADER = 'X-Signature-Timestamp'
PUBLIC_KEY_LENGTH = 32


class AuthFailure(Enum):
    """Reason an interaction request was not authorized."""
    NO_PUBLIC_KEY = 'no_public_key'
    NO_RAW_BODY = 'no_raw_body'
    MISSING_HEADERS = 'missing_headers'
    INVALID_SIGNATURE = 'invalid_signature'


class AuthResult:
    """Base class for authentication verdicts."""
    authorized = False
    status_code = 500


@dataclass(frozen=True)
class Authorized(AuthResult):
    authorized = True
    status_code = 200


@dataclass(frozen=True)
class Unauthorized(AuthResult):
    """The caller failed to prove the request came from Discord."""
    reason: AuthFailure
    status_code = 401


@dataclass(frozen=True)
class ServerMisconfigured(AuthResult):
    """The request cannot be checked because of host configuration."""
    reason: AuthFailure
    status_code = 500


def _decode_hex(value: Optional[str]) -> Optional[bytes]:
    if not value:
        return None
    try:
        return binascii.unhexlify(value.strip())
    except (binascii.Error, ValueError):
        return None


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Look up a header, case-insensitively for plain dicts."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                return candidate
    return value


@traced_function("authenticate_request")
def authenticate(
    raw_body: Optional[bytes],
    headers: Mapping[str, str],
    public_key: Optional[str],
    correlation_id: Optional[str] = None
) -> AuthResult:
    """Authenticate a Discord interaction request.

    Args:
        raw_body: Byte-exact request body, or None if it was not captured
        headers: Request headers (werkzeug headers or a plain mapping)
        public_key: Configured application public key, hex encoded
        correlation_id: Correlation ID for logging

    Returns:
        Authorized, Unauthorized(reason) or ServerMisconfigured(reason)
    """
    key_bytes = _decode_hex(public_key)
    if key_bytes is None or len(key_bytes) != PUBLIC_KEY_LENGTH:
        logger.error("Discord public key is not configured or invalid", correlation_id=correlation_id)
        return ServerMisconfigured(AuthFailure.NO_PUBLIC_KEY)

    if raw_body is None:
        logger.error(
            "Could not retrieve cached request body, is body capture configured?",
            correlation_id=correlation_id
        )
        return ServerMisconfigured(AuthFailure.NO_RAW_BODY)

    signature = _header(headers, SIGNATURE_HEADER)
    timestamp = _header(headers, TIMESTAMP_HEADER)
    if not signature or not timestamp:
        logger.warning(
            "Discord interaction request misses required security headers",
            correlation_id=correlation_id,
            signature_present=bool(signature),
            timestamp_present=bool(timestamp)
        )
        return Unauthorized(AuthFailure.MISSING_HEADERS)

    signature_bytes = _decode_hex(signature)
    if signature_bytes is None:
        logger.warning("Discord interaction signature is not valid hex", correlation_id=correlation_id)
        return Unauthorized(AuthFailure.MISSING_HEADERS)

    try:
        message = signed_message(timestamp, raw_body)
    except UnicodeEncodeError:
        message = None
    if message is None or not verify(signature_bytes, message, key_bytes):
        logger.warning("Discord interaction request has invalid signature", correlation_id=correlation_id)
        return Unauthorized(AuthFailure.INVALID_SIGNATURE)

    return Authorized()
