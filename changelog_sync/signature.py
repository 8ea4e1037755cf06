"""
GitHub webhook signature helpers (X-Hub-Signature-256).
"""

import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def sign_payload(body: bytes, secret: str) -> str:
    """Compute the ``sha256=<hex>`` signature of *body* using *secret*."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Check *signature* against the raw request *body*.
    
    Must be given the bytes exactly as received: re-serializing a parsed
    payload changes whitespace and key order, and therefore the digest.
    """
    if not signature or not secret:
        return False
    expected = sign_payload(body, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())
