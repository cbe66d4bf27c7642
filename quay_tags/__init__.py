"""Fetch and rank Quay.io image tags."""

from quay_tags.registry.cache import TagCache, shared_cache
from quay_tags.registry.client import TagClient
from quay_tags.registry.errors import (
    AccessDeniedError,
    AuthenticationError,
    NoTagsFoundError,
    QuayError,
    RateLimitError,
    RegistryApiError,
    RepositoryNotFoundError,
    TransportError,
    ValidationError,
)
from quay_tags.registry.models import Tag

__all__ = [
    "AccessDeniedError",
    "AuthenticationError",
    "NoTagsFoundError",
    "QuayError",
    "RateLimitError",
    "RegistryApiError",
    "RepositoryNotFoundError",
    "Tag",
    "TagCache",
    "TagClient",
    "TransportError",
    "ValidationError",
    "shared_cache",
]
