"""Shared fixtures: an in-memory forms backend and a clean environment."""

from typing import Dict, List, Optional

import pytest

from guestbook_feed.errors import UpstreamError
from guestbook_feed.types import Credential, FormSummary, Submission


class FakeFormsClient:
    """In-memory stand-in for the forms backend.

    Records every call so tests can assert on what was requested.
    """

    def __init__(
        self,
        forms: Optional[List[dict]] = None,
        submissions: Optional[Dict[str, List[dict]]] = None,
        forms_error: Optional[UpstreamError] = None,
        submissions_error: Optional[UpstreamError] = None,
    ):
        self.forms = forms or []
        self.submissions = submissions or {}
        self.forms_error = forms_error
        self.submissions_error = submissions_error
        self.calls: List[tuple] = []

    def list_forms(self, credential: Credential) -> List[FormSummary]:
        self.calls.append(("list_forms", credential.site_scope))
        if self.forms_error is not None:
            raise self.forms_error
        return [FormSummary.from_dict(f) for f in self.forms]

    def list_submissions(self, form_id: str, credential: Credential) -> List[Submission]:
        self.calls.append(("list_submissions", form_id))
        if self.submissions_error is not None:
            raise self.submissions_error
        return [Submission.from_dict(s) for s in self.submissions.get(form_id, [])]


@pytest.fixture
def fake_client_factory():
    return FakeFormsClient


@pytest.fixture
def environ():
    return {"NETLIFY_AUTH_TOKEN": "test-token"}


@pytest.fixture
def scoped_environ():
    return {"NETLIFY_AUTH_TOKEN": "test-token", "SITE_ID": "site-mine"}
