"""HTTP client for the Quay.io tag-listing API."""

from __future__ import annotations

import hashlib
import json
import logging
import re
from functools import cache
from importlib import resources
from typing import Any

import jsonschema
import requests

from quay_tags.registry.cache import TagCache, shared_cache
from quay_tags.registry.errors import (
    NoTagsFoundError,
    TransportError,
    ValidationError,
    error_for_status,
)
from quay_tags.registry.models import Tag, TagPage, sort_by_recency

logger = logging.getLogger(__name__)

QUAY_API_URL = "https://quay.io/api/v1"
QUAY_HOST = "quay.io"
DEFAULT_LIMIT = 20

# Connect and read timeouts, in seconds.
DEFAULT_TIMEOUT: tuple[float, float] = (30, 30)

# Letters, digits, dot, underscore, slash and hyphen only.
_NAME_RE = re.compile(r"[A-Za-z0-9._/-]+")

_PUBLIC_IDENTITY = "public"


class TagClient:
    """Client for listing the tags of a Quay.io repository.

    Results are cached for five minutes in a :class:`TagCache`, keyed by
    organization, repository, limit and credential identity.

    Args:
        token: Robot or OAuth token sent as a bearer credential. ``None`` or
            a blank string means anonymous access.
        cache: Cache to use. Defaults to the process-wide ``shared_cache``.
        api_url: Base URL of the Quay.io API v1.
        timeout: ``(connect, read)`` timeouts in seconds.
        session: Optional pre-built :class:`requests.Session`.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        cache: TagCache | None = None,
        api_url: str = QUAY_API_URL,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._token = token.strip() if token and token.strip() else None
        self.cache = cache if cache is not None else shared_cache
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_tags(
        self,
        organization: str,
        repository: str,
        limit: int = DEFAULT_LIMIT,
    ) -> list[Tag]:
        """Return up to *limit* active tags, most recent first.

        Args:
            organization: The organization or user namespace.
            repository: The repository name.
            limit: Maximum number of tags requested from the API.

        Returns:
            A new list the caller is free to mutate.

        Raises:
            ValidationError: If an argument is rejected.
            RegistryApiError: If the API answers with an error status.
            TransportError: On network failure or an undecodable body.
        """
        validate_name(organization, "organization")
        validate_name(repository, "repository")
        _validate_limit(limit)

        key = self._cache_key(organization, repository, limit)

        cached = self.cache.get(key)
        if cached is not None:
            if not self.cache.is_expired(cached):
                logger.debug("Returning cached tags for %s/%s", organization, repository)
                return list(cached.tags)
            logger.debug("Cached tags for %s/%s expired", organization, repository)
            self.cache.remove(key)

        tags = self._fetch_tags(organization, repository, limit)
        self.cache.put(key, tags)
        return list(tags)

    def latest_tag(self, organization: str, repository: str) -> Tag:
        """Return the most recent active tag.

        Raises:
            NoTagsFoundError: If the repository has no active tags.
        """
        tags = self.get_tags(organization, repository, limit=1)
        if not tags:
            raise NoTagsFoundError(f"No tags found in repository {organization}/{repository}")
        return tags[0]

    def resolve_image_reference(
        self,
        organization: str,
        repository: str,
        tag: str | None = None,
    ) -> str:
        """Build an image reference, picking the most recent tag if *tag* is blank."""
        if tag is None or not tag.strip():
            tag = self.latest_tag(organization, repository).name
            logger.info("Using most recent tag: %s", tag)
        return self.build_image_reference(organization, repository, tag)

    def test_connection(self, organization: str, repository: str) -> str:
        """Fetch a handful of tags and describe the outcome."""
        tags = self.get_tags(organization, repository, limit=5)
        return f"Success! Found {len(tags)} tags."

    def validate_repository(self, organization: str, repository: str) -> bool:
        """Return whether the repository exists and is readable.

        This is a best-effort probe: it never raises.
        """
        try:
            validate_name(organization, "organization")
            validate_name(repository, "repository")
        except ValidationError as exc:
            logger.warning("Failed to validate repository: %s", exc)
            return False

        url = f"{self.api_url}/repository/{organization}/{repository}"
        try:
            resp = self._request(url)
        except requests.RequestException as exc:
            logger.warning("Failed to validate repository: %s", exc)
            return False

        success = _is_success(resp)
        if not success:
            logger.warning(
                "Repository %s/%s not accessible (HTTP %d)",
                organization,
                repository,
                resp.status_code,
            )
        return success

    @staticmethod
    def build_image_reference(organization: str, repository: str, tag: str) -> str:
        """Return the full image reference (e.g. ``quay.io/org/repo:tag``)."""
        return f"{QUAY_HOST}/{organization}/{repository}:{tag}"

    def clear_cache(self) -> None:
        """Drop every cached result, forcing the next lookup to hit the API."""
        self.cache.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _fetch_tags(self, organization: str, repository: str, limit: int) -> list[Tag]:
        url = f"{self.api_url}/repository/{organization}/{repository}/tag/"
        params = {"limit": limit, "onlyActiveTags": "true"}

        try:
            resp = self._request(url, params=params, accept="application/json")
        except requests.RequestException as exc:
            logger.error("Network error fetching tags: %s", exc)
            raise TransportError(f"Network error: {exc}") from exc

        if not _is_success(resp):
            error = error_for_status(resp.status_code, organization, repository)
            logger.warning("Quay API error: %s", error)
            raise error

        try:
            data = resp.json()
            _tag_listing_validator().validate(data)
        except ValueError as exc:
            logger.error("Undecodable tag listing for %s/%s", organization, repository)
            raise TransportError(f"Network error: {exc}") from exc
        except jsonschema.ValidationError as exc:
            logger.error("Malformed tag listing for %s/%s", organization, repository)
            raise TransportError(f"Malformed response: {exc.message}") from exc

        page = TagPage.from_json(data)
        return sort_by_recency(page.tags)

    def _request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> requests.Response:
        """Execute a single GET request, attaching the bearer token if available."""
        headers: dict[str, str] = {}
        if accept:
            headers["Accept"] = accept
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        logger.debug("GET %s", url)
        return self._session.get(url, params=params, headers=headers, timeout=self.timeout)

    def _cache_key(self, organization: str, repository: str, limit: int) -> str:
        return f"{organization}/{repository}:{limit}:{self._identity()}"

    def _identity(self) -> str:
        if self._token is None:
            return _PUBLIC_IDENTITY
        return hashlib.sha256(self._token.encode("utf-8")).hexdigest()[:16]


def validate_name(value: str | None, field: str) -> None:
    """Check an organization or repository name.

    Raises:
        ValidationError: If *value* is empty or has a disallowed character.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field} cannot be empty")
    if not _NAME_RE.fullmatch(value):
        raise ValidationError(
            field,
            f"{field} contains invalid characters. Only alphanumeric characters, "
            "dots, underscores, slashes, and hyphens are allowed.",
        )


def _validate_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError("limit", "limit must be a positive integer")


def _load_schema() -> dict[str, Any]:
    """Load the tag-listing JSON Schema from the ``quay_tags.schemas`` package."""
    schema_ref = resources.files("quay_tags.schemas").joinpath("tags.schema.json")
    schema_text = schema_ref.read_text(encoding="utf-8")
    return json.loads(schema_text)  # type: ignore[no-any-return]


@cache
def _tag_listing_validator() -> jsonschema.protocols.Validator:
    """Build the tag-listing validator once per process."""
    schema = _load_schema()
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _is_success(resp: requests.Response) -> bool:
    return 200 <= resp.status_code < 300
