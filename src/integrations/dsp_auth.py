"""Partner (DSP) request signing.

Every partner API call carries two headers:

    X-Timestamp: UTC time as yyyyMMddHHmmss
    X-Signature: base64(HMAC-SHA256(secret_key, canonical_string))

The canonical string is ``<json_body>.<timestamp>`` when a body is sent and
``<timestamp>`` alone when there is none (GET). Whether a body was supplied
decides the form, not its contents: an explicit ``{}`` still signs as
``{}.<timestamp>``.

The functions here do not validate ``secret_key``; an empty key yields a
signature the server will reject. ``DspClient`` refuses to start without a
key instead.
"""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone
from typing import Any, Callable, Final, Optional

TIMESTAMP_FORMAT: Final[str] = "%Y%m%d%H%M%S"
TIMESTAMP_HEADER: Final[str] = "X-Timestamp"
SIGNATURE_HEADER: Final[str] = "X-Signature"

Clock = Callable[[], datetime]


class _NoBody:
    """Sentinel type for 'no request body supplied'."""

    _instance: Optional["_NoBody"] = None

    def __new__(cls) -> "_NoBody":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_BODY"

    def __bool__(self) -> bool:
        return False


NO_BODY: Final = _NoBody()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def current_timestamp(clock: Optional[Clock] = None) -> str:
    """Return the current UTC time formatted as ``yyyyMMddHHmmss``.

    Args:
        clock: Callable returning a datetime; defaults to the wall clock.
            Naive datetimes are taken as UTC.
    """
    now = (clock or _utc_now)()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def serialize_body(body: Any) -> str:
    """Serialize a JSON value exactly as it will be transmitted.

    Compact separators, insertion key order and unescaped non-ASCII, the
    same layout as JavaScript's ``JSON.stringify`` for strings, integers,
    lists and objects. Floats keep Python's repr (``1.0`` stays ``1.0``).
    NaN and infinities are rejected.

    Raises:
        ValueError: If the body contains NaN or an infinity
    """
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def canonical_string(timestamp: str, body_text: Optional[str] = None) -> str:
    """Build the string that gets signed.

    Args:
        timestamp: Value of the X-Timestamp header
        body_text: Serialized request body, or None when no body is sent
    """
    if body_text is None:
        return timestamp
    return f"{body_text}.{timestamp}"


def sign_serialized(secret_key: str, timestamp: str, body_text: Optional[str] = None) -> str:
    """Sign an already-serialized body (or no body) and return base64."""
    message = canonical_string(timestamp, body_text).encode("utf-8")
    digest = hmac.new(secret_key.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_signature(secret_key: str, timestamp: str, body: Any = NO_BODY) -> str:
    """Return the base64 HMAC-SHA256 signature for a request.

    Args:
        secret_key: Shared partner secret
        timestamp: ``yyyyMMddHHmmss`` timestamp sent alongside
        body: JSON value of the request body; omit for requests without one

    Returns:
        Base64-encoded signature
    """
    body_text = None if body is NO_BODY else serialize_body(body)
    return sign_serialized(secret_key, timestamp, body_text)


def generate_dsp_auth_headers(
    secret_key: str,
    body: Any = NO_BODY,
    clock: Optional[Clock] = None,
) -> dict[str, str]:
    """Generate fresh X-Timestamp and X-Signature headers.

    A new timestamp is taken on every call, so two calls at different
    seconds give different headers for the same body.
    """
    timestamp = current_timestamp(clock)
    return {
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: generate_signature(secret_key, timestamp, body),
    }


def verify_signature(
    secret_key: str, timestamp: str, signature: str, body_text: Optional[str] = None
) -> bool:
    """Check a signature in constant time. Used by test doubles of the partner API."""
    expected = sign_serialized(secret_key, timestamp, body_text)
    return hmac.compare_digest(expected, signature)
