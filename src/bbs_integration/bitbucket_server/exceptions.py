"""Bitbucket Server integration exception types.

Parsing and transport failures propagate to the immediate caller as these
exceptions. Authorization checks and file lookups catch them and collapse
the outcome into ``False`` / ``None``.
"""

from typing import Optional, Sequence


class BitbucketServerError(Exception):
    """Base exception for all Bitbucket Server integration errors."""

    pass


class InvalidURLError(BitbucketServerError):
    """URL is not a Bitbucket Server repository clone or browse URL."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        message = f"Not a Bitbucket Server repository URL: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProviderMismatchError(BitbucketServerError):
    """URL points at a different host than the configured provider."""

    def __init__(self, url: str, host: str, expected_host: str):
        self.url = url
        self.host = host
        self.expected_host = expected_host
        super().__init__(
            f"Host '{host}' of {url} is not served by provider for '{expected_host}'"
        )


class UnauthorizedError(BitbucketServerError):
    """No usable token for the host, or the token lacks required scopes."""

    def __init__(self, host: str, required_scopes: Sequence[str] = (), reason: str = "missing-identity"):
        self.host = host
        self.required_scopes = list(required_scopes)
        self.reason = reason
        super().__init__(
            f"Not authorized with {host} ({reason}); required scopes: {self.required_scopes}"
        )


class RemoteError(BitbucketServerError):
    """Bitbucket Server returned a non-2xx response, or the request failed in transport.

    ``status`` is 0 for transport failures.
    """

    def __init__(
        self,
        status: int,
        status_text: str = "",
        response_body: str = "",
        retry_after: Optional[float] = None,
    ):
        self.status = status
        self.status_text = status_text
        self.response_body = response_body
        self.retry_after = retry_after
        super().__init__(f"{status} / {status_text}")


class RemoteAuthError(RemoteError):
    """Authentication or authorization failure (401/403)."""

    pass


class RemoteNotFoundError(RemoteError):
    """Resource not found (404)."""

    pass


class RemoteTimeoutError(RemoteError):
    """Request timed out."""

    def __init__(self, status_text: str = "Request timed out"):
        super().__init__(0, status_text)


class WebhookVerificationError(BitbucketServerError):
    """Webhook creation returned successfully but the hook is not listed afterwards."""

    def __init__(self, clone_url: str):
        self.clone_url = clone_url
        super().__init__(f"Webhook for {clone_url} not found after creation")


class UnexpectedResponseError(BitbucketServerError):
    """A 2xx response body did not have the expected shape."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Unexpected response from {path}: {detail}")
