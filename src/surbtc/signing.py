"""Request signing for authenticated SURBTC endpoints.

Every authenticated request carries three headers: the API key, a nonce
(epoch milliseconds) and an HMAC-SHA384 hex digest over a canonical message:

- requests without a body: ``"{METHOD} {PATH} {NONCE}"``
- requests with a body: ``"{METHOD} {PATH} {BASE64(JSON)} {NONCE}"``

``PATH`` is the path of the full request URL, query string included.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Mapping
from urllib.parse import urlsplit

from .errors import ConfigurationError

API_KEY_HEADER = "X-API-KEY"
NONCE_HEADER = "X-NONCE"
SIGNATURE_HEADER = "X-SIGNATURE"

BODYLESS_METHODS = frozenset({"GET", "DELETE"})
BODY_METHODS = frozenset({"POST", "PUT"})
SUPPORTED_METHODS = BODYLESS_METHODS | BODY_METHODS


def encode_body(body: Any) -> str:
    """Serialize a request body the way it is both sent and signed."""
    return json.dumps(body, separators=(",", ":"))


def signing_path(url: str) -> str:
    """Return the path component of ``url`` with its query string, if any."""
    parts = urlsplit(url)
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path


def canonical_message(method: str, path: str, nonce: int | str, body: str | None = None) -> str:
    """Build the message that gets signed.

    Args:
        method: HTTP method (upper case)
        path: Request path as produced by ``signing_path``
        nonce: Request nonce
        body: Serialized JSON body for POST/PUT

    Raises:
        ConfigurationError: If the method cannot be signed
    """
    if method in BODYLESS_METHODS:
        return f"{method} {path} {nonce}"
    if method in BODY_METHODS:
        encoded = base64.b64encode((body or "").encode()).decode()
        return f"{method} {path} {encoded} {nonce}"
    raise ConfigurationError(f"Authentication for {method} is not implemented")


def sign(
    secret: str,
    method: str,
    path: str,
    nonce: int | str,
    body: str | None = None,
) -> str:
    """Generate the HMAC-SHA384 signature for a request.

    Identical inputs always produce the identical digest.

    Returns:
        Lowercase hex-encoded signature
    """
    message = canonical_message(method.upper(), path, nonce, body)
    return hmac.new(secret.encode(), message.encode(), hashlib.sha384).hexdigest()


def make_nonce() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def build_auth_headers(
    api_key: str,
    secret: str,
    method: str,
    url: str,
    body: str | None = None,
    *,
    base_headers: Mapping[str, str] | None = None,
    nonce: int | None = None,
) -> dict[str, str]:
    """Merge the base headers with the three authentication headers.

    A single nonce is minted per call and shared by the nonce header and the
    signature.
    """
    if nonce is None:
        nonce = make_nonce()
    headers = {
        API_KEY_HEADER: api_key,
        NONCE_HEADER: str(nonce),
        SIGNATURE_HEADER: sign(secret, method, signing_path(url), nonce, body),
    }
    if base_headers:
        headers.update(base_headers)
    return headers
