"""Cache key derivation.

Keys are SHA-256 digests so that neither URLs nor credentials appear in
storage. Authenticated requests are scoped by a credential fingerprint,
which is itself a truncated one-way hash of the credential fields.
"""

import hashlib
import json

from smart_fetch.entities import HttpAuth

FINGERPRINT_LENGTH = 16


def derive_key(url: str, credential_fingerprint: str | None = None) -> str:
    """Derive the cache key for a URL.

    Args:
        url: The requested URL
        credential_fingerprint: Pre-hashed credential fingerprint, never raw secrets

    Returns:
        Hex-encoded SHA-256 digest
    """
    base = f"{credential_fingerprint}:{url}" if credential_fingerprint else url
    return hashlib.sha256(base.encode("utf-8")).hexdigest()


def credential_fingerprint(auth: HttpAuth | None) -> str | None:
    """Compute a one-way fingerprint for a set of credentials.

    Args:
        auth: Authentication selector and credentials (None for anonymous)

    Returns:
        First 16 hex characters of a SHA-256 over the canonical credential
        JSON, or None when no authentication is used
    """
    if auth is None or auth.is_anonymous:
        return None

    canonical = json.dumps(
        {"method": auth.method, "credentials": auth.credentials},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]
