"""Configuration resolution for the guestbook feed.

Environment state is read once per request into an explicit
GuestbookSettings value that is then passed into the pipeline. Nothing else
in the package reads ``os.environ``.

Recognized variables:
    NETLIFY_AUTH_TOKEN / NETLIFY_TOKEN    bearer token (required)
    SITE_ID / NETLIFY_SITE_ID             site scope (optional)
    NETLIFY_API_URL                       API base URL
    GUESTBOOK_HTTP_TIMEOUT                request timeout in seconds
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from guestbook_feed.errors import ConfigError
from guestbook_feed.types import Credential

logger = logging.getLogger(__name__)

TOKEN_VARIABLES = ("NETLIFY_AUTH_TOKEN", "NETLIFY_TOKEN")
SITE_SCOPE_VARIABLES = ("SITE_ID", "NETLIFY_SITE_ID")
API_URL_VARIABLE = "NETLIFY_API_URL"
TIMEOUT_VARIABLE = "GUESTBOOK_HTTP_TIMEOUT"

DEFAULT_API_URL = "https://api.netlify.com/api/v1"
DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class GuestbookSettings:
    """Everything a single request needs from its environment.

    Attributes:
        credential: Bearer token and optional site scope
        api_url: Base URL of the forms backend REST API
        timeout_s: Timeout applied to each upstream request
    """
    credential: Credential
    api_url: str = DEFAULT_API_URL
    timeout_s: float = DEFAULT_TIMEOUT_S


def _first_set(environ: Mapping[str, str], names) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


def _context_site_id(context: Any) -> Optional[str]:
    """Pull a site id out of the invocation context, if it carries one.

    Accepts either a mapping or an object, with ``site_id`` at the top
    level or an ``id`` nested under ``site``.
    """
    if context is None:
        return None

    def lookup(obj: Any, key: str) -> Any:
        if isinstance(obj, Mapping):
            return obj.get(key)
        return getattr(obj, key, None)

    site_id = lookup(context, "site_id")
    if site_id:
        return str(site_id)
    site = lookup(context, "site")
    if site is not None:
        nested = lookup(site, "id")
        if nested:
            return str(nested)
    return None


def resolve_credential(
    environ: Optional[Mapping[str, str]] = None,
    context: Any = None,
) -> Credential:
    """Derive the Credential from environment and invocation context.

    Args:
        environ: Environment mapping, defaults to ``os.environ``
        context: Invocation context supplied by the serverless runtime

    Returns:
        Credential with the token and, when known, the site scope

    Raises:
        ConfigError: If neither token variable is set

    Examples:
        >>> resolve_credential({"NETLIFY_TOKEN": "t"}).site_scope is None
        True
        >>> resolve_credential({"NETLIFY_TOKEN": "t", "SITE_ID": "s1"}).site_scope
        's1'
    """
    if environ is None:
        environ = os.environ

    token = _first_set(environ, TOKEN_VARIABLES)
    if not token:
        raise ConfigError("Missing NETLIFY_AUTH_TOKEN (or NETLIFY_TOKEN)")

    site_scope = _first_set(environ, SITE_SCOPE_VARIABLES) or _context_site_id(context)
    if site_scope is None:
        logger.debug("No site scope configured, listing forms account-wide")

    return Credential(token=token, site_scope=site_scope)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    context: Any = None,
) -> GuestbookSettings:
    """Read the full per-request settings.

    Raises:
        ConfigError: If the token is missing or the timeout is malformed
    """
    if environ is None:
        environ = os.environ

    credential = resolve_credential(environ, context)
    api_url = (environ.get(API_URL_VARIABLE) or DEFAULT_API_URL).rstrip("/")

    raw_timeout = environ.get(TIMEOUT_VARIABLE)
    timeout_s = DEFAULT_TIMEOUT_S
    if raw_timeout:
        try:
            timeout_s = float(raw_timeout)
        except ValueError:
            raise ConfigError(
                f"{TIMEOUT_VARIABLE} must be a number of seconds, got {raw_timeout!r}"
            ) from None
        if timeout_s <= 0:
            raise ConfigError(f"{TIMEOUT_VARIABLE} must be positive, got {raw_timeout!r}")

    return GuestbookSettings(credential=credential, api_url=api_url, timeout_s=timeout_s)


__all__ = [
    "GuestbookSettings",
    "resolve_credential",
    "load_settings",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT_S",
]
