"""Security module: scoped webhook tokens and webhook secrets."""

from .tokens import JWTScopedTokenIssuer, build_webhook_credential, parse_webhook_credential
from .webhook_secrets import derive_webhook_secret, verify_webhook_signature

__all__ = [
    "JWTScopedTokenIssuer",
    "build_webhook_credential",
    "parse_webhook_credential",
    "derive_webhook_secret",
    "verify_webhook_signature",
]
