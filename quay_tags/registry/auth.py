"""Bearer token resolution for Quay.io."""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

_ENV_PREFIX = "QUAY_TAGS_TOKEN"


def resolve_token(organization: str, cli_token: str | None = None) -> str | None:
    """Resolve the bearer token to use for *organization*.

    Order of precedence:
    1. CLI-provided token (--token flag)
    2. Organization-specific env var (e.g., QUAY_TAGS_TOKEN_MY_ORG)
    3. Global env var (QUAY_TAGS_TOKEN)

    Blank values are skipped.

    Args:
        organization: The Quay.io organization the token is for.
        cli_token: Token given on the command line, if any.

    Returns:
        The token, or None for anonymous access.
    """
    if cli_token and cli_token.strip():
        logger.debug("Using CLI token for %s", organization)
        return cli_token.strip()

    org_var = f"{_ENV_PREFIX}_{_env_suffix(organization)}"
    org_token = os.environ.get(org_var, "").strip()
    if org_token:
        logger.debug("Using %s for %s", org_var, organization)
        return org_token

    global_token = os.environ.get(_ENV_PREFIX, "").strip()
    if global_token:
        logger.debug("Using %s for %s", _ENV_PREFIX, organization)
        return global_token

    logger.debug("No token found for %s, using anonymous access", organization)
    return None


def _env_suffix(organization: str) -> str:
    return organization.upper().replace(".", "_").replace("-", "_").replace("/", "_")
