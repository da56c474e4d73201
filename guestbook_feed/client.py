"""Forms backend client.

FormsClient is the capability the pipeline depends on: "list forms" and
"list submissions". NetlifyFormsClient implements it against the Netlify
REST API on top of httpx. Tests substitute any object with the same two
methods.

Known limitation: only the first page of submissions (SUBMISSIONS_PAGE_SIZE
entries) is read. Older entries beyond that page are not returned.
"""

import logging
from typing import List, Optional, Protocol
from urllib.parse import quote

import httpx

from guestbook_feed.config import DEFAULT_API_URL, DEFAULT_TIMEOUT_S, GuestbookSettings
from guestbook_feed.errors import UpstreamError
from guestbook_feed.types import Credential, FormSummary, Submission
from guestbook_feed.validation import PayloadValidator


logger = logging.getLogger(__name__)

SUBMISSIONS_PAGE_SIZE = 200


class FormsClient(Protocol):
    """Upstream operations the pipeline needs."""

    def list_forms(self, credential: Credential) -> List[FormSummary]:
        ...

    def list_submissions(self, form_id: str, credential: Credential) -> List[Submission]:
        ...


def _raise_for_status(response: httpx.Response, message: str) -> None:
    if response.is_success:
        return
    request = response.request
    logger.warning(
        "%s %s -> %s", request.method, request.url.path, response.status_code
    )
    raise UpstreamError(
        status_code=response.status_code,
        details=response.text,
        message=message,
    )


class NetlifyFormsClient:
    """Netlify Forms API client.

    Every call is a single request with no retries. Non-2xx answers raise
    UpstreamError carrying the upstream status and body; network failures
    propagate as httpx exceptions.

    Requests are sent to absolute URLs under ``base_url``, so an injected
    httpx.Client needs no base_url of its own.

    Examples:
        >>> client = NetlifyFormsClient()  # doctest: +SKIP
        >>> client.list_forms(Credential(token="t"))  # doctest: +SKIP
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: Optional[httpx.Client] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        validator: Optional[PayloadValidator] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout_s)
        self._owns_client = client is None
        self._validator = validator or PayloadValidator()

    @classmethod
    def from_settings(cls, settings: GuestbookSettings) -> "NetlifyFormsClient":
        return cls(base_url=settings.api_url, timeout_s=settings.timeout_s)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "NetlifyFormsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def forms_path(self, credential: Credential) -> str:
        """Site-qualified listing when a scope is known, account-wide otherwise."""
        if credential.site_scope:
            return f"/sites/{quote(credential.site_scope, safe='')}/forms"
        return "/forms"

    def list_forms(self, credential: Credential) -> List[FormSummary]:
        """List the forms visible to the credential.

        Raises:
            UpstreamError: If the backend answers with a non-success status
            UpstreamPayloadError: If the body is not a list of forms
        """
        r = self._client.get(self.url(self.forms_path(credential)), headers=credential.auth_headers())
        _raise_for_status(r, "Failed to list forms")
        forms = self._validator.validate_forms(r.json())
        logger.debug("Listed %d forms", len(forms))
        return forms

    def list_submissions(self, form_id: str, credential: Credential) -> List[Submission]:
        """List the first page of submissions for a form.

        Raises:
            UpstreamError: If the backend answers with a non-success status
            UpstreamPayloadError: If the body is not a list of submissions
        """
        r = self._client.get(
            self.url(f"/forms/{quote(form_id, safe='')}/submissions"),
            params={"per_page": SUBMISSIONS_PAGE_SIZE},
            headers=credential.auth_headers(),
        )
        _raise_for_status(r, "Failed to list submissions")
        submissions = self._validator.validate_submissions(r.json())
        if len(submissions) >= SUBMISSIONS_PAGE_SIZE:
            logger.warning(
                "Form %s returned a full page of %d submissions; older entries are not shown",
                form_id,
                SUBMISSIONS_PAGE_SIZE,
            )
        return submissions


__all__ = [
    "FormsClient",
    "NetlifyFormsClient",
    "SUBMISSIONS_PAGE_SIZE",
]
