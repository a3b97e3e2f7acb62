"""Per-installation webhook secrets and delivery signature checks.

Each repository's webhook gets its own secret, derived from SECRET_KEY and
the clone URL via HKDF. Nothing needs to be stored: the receiving side
derives the same secret again to verify ``X-Hub-Signature`` headers.
"""

import hashlib
import hmac
import logging

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

logger = logging.getLogger(__name__)

# Stable salt so the same SECRET_KEY always derives the same webhook secrets.
_KDF_SALT = b"bbs-integration-webhook-secret-v1"
_SECRET_LENGTH = 32

SIGNATURE_HEADER = "X-Hub-Signature"
SIGNATURE_PREFIX = "sha256="


def derive_webhook_secret(master_secret: str, clone_url: str) -> str:
    """Derive the webhook secret for one repository."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=_SECRET_LENGTH,
        salt=_KDF_SALT,
        info=clone_url.encode("utf-8"),
    )
    return hkdf.derive(master_secret.encode("utf-8")).hex()


def sign_payload(secret: str, body: bytes) -> str:
    """Signature header value Bitbucket Server sends for body."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_webhook_signature(secret: str, body: bytes, signature_header: str) -> bool:
    """Check an ``X-Hub-Signature`` value against the delivered body."""
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        logger.debug("Missing or unsupported webhook signature header")
        return False
    return hmac.compare_digest(sign_payload(secret, body), signature_header)
