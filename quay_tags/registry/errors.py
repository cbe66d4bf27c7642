"""Exceptions raised by the Quay.io tag client."""

from __future__ import annotations


class QuayError(Exception):
    """Base class for every error raised by :mod:`quay_tags`."""


class ValidationError(QuayError):
    """Raised when an organization, repository or limit is rejected.

    Args:
        field: Name of the offending argument.
        reason: Human-readable explanation.
    """

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.reason = reason


class RegistryApiError(QuayError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(RegistryApiError):
    """HTTP 401."""


class AccessDeniedError(RegistryApiError):
    """HTTP 403."""


class RepositoryNotFoundError(RegistryApiError):
    """HTTP 404."""


class RateLimitError(RegistryApiError):
    """HTTP 429."""


class TransportError(QuayError):
    """Raised on connection, timeout or response decoding failures."""


class NoTagsFoundError(QuayError):
    """Raised when a repository has no active tag to pick from."""


def error_for_status(status_code: int, organization: str, repository: str) -> RegistryApiError:
    """Map an HTTP error status to the matching :class:`RegistryApiError`."""
    if status_code == 401:
        return AuthenticationError(
            "Authentication failed. Please check your Quay.io credentials.",
            status_code,
        )
    if status_code == 403:
        return AccessDeniedError(
            f"Access denied to repository {organization}/{repository}. "
            "Ensure you have permission and valid credentials.",
            status_code,
        )
    if status_code == 404:
        return RepositoryNotFoundError(
            f"Repository {organization}/{repository} not found. "
            "Please verify the organization and repository names.",
            status_code,
        )
    if status_code == 429:
        return RateLimitError("Rate limit exceeded. Please try again later.", status_code)
    return RegistryApiError(f"Quay.io API error (HTTP {status_code})", status_code)
