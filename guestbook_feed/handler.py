"""Serverless HTTP entry point for the guestbook feed.

``handler(event, context)`` follows the Netlify Functions / AWS Lambda
calling convention: ``event`` carries ``httpMethod`` and
``queryStringParameters``, and the return value is a dict with
``statusCode``, ``headers`` and a JSON ``body``.

Responses:
    OPTIONS                 204, no body, CORS preflight headers
    GET, rows               200, JSON array, cache-control: no-store
    GET, no guestbook form  200, []
    missing token           500, {"error": ...}
    upstream failure        upstream status, {"error": ..., "details": ...}
    anything else           500, {"error": str(exc)}

No exception escapes ``handler``.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from guestbook_feed.client import FormsClient
from guestbook_feed.normalizer import parse_include_spam
from guestbook_feed.pipeline import GuestbookPipeline
from guestbook_feed.types import ErrorType

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, OPTIONS"


def cors_headers(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Base response headers: JSON content type and open CORS."""
    headers = {
        "content-type": "application/json; charset=utf-8",
        "access-control-allow-origin": "*",
    }
    if extra:
        headers.update(extra)
    return headers


def build_response(
    status_code: int,
    body: Any,
    extra_headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Wrap a JSON-serializable body into a function response.

    Examples:
        >>> build_response(200, [])["body"]
        '[]'
    """
    return {
        "statusCode": status_code,
        "headers": cors_headers(extra_headers),
        "body": json.dumps(body),
    }


def preflight_response() -> Dict[str, Any]:
    return {
        "statusCode": 204,
        "headers": cors_headers({
            "access-control-allow-methods": ALLOWED_METHODS,
            "access-control-allow-headers": "content-type",
        }),
        "body": "",
    }


def handler(
    event: Optional[Mapping[str, Any]],
    context: Any = None,
    client: Optional[FormsClient] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Serve the guestbook entries.

    Args:
        event: Invocation event from the serverless runtime
        context: Invocation context, may carry the site id
        client: Forms backend client to use instead of the Netlify API
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        Response dict with statusCode, headers and body
    """
    try:
        event = event or {}
        method = (event.get("httpMethod") or "GET").upper()

        if method == "OPTIONS":
            return preflight_response()
        if method != "GET":
            return build_response(
                405,
                {"error": f"Method {method} not allowed"},
                {"allow": ALLOWED_METHODS},
            )

        include_spam = parse_include_spam(event.get("queryStringParameters"))
        result = GuestbookPipeline(client=client).run(
            include_spam=include_spam,
            environ=environ,
            context=context,
        )

        if not result.ok:
            logger.warning(
                "Guestbook request failed (%s, HTTP %d): %s",
                result.error_type.value,
                result.status_code,
                result.error.message,
            )
            return build_response(result.status_code, result.body())
        return build_response(200, result.body(), {"cache-control": "no-store"})

    except Exception as exc:
        logger.exception("Guestbook request failed (%s)", ErrorType.UNEXPECTED.value)
        return build_response(500, {"error": str(exc)})


__all__ = [
    "handler",
    "build_response",
    "cors_headers",
    "preflight_response",
    "ALLOWED_METHODS",
]
