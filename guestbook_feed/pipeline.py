"""Submission resolution pipeline.

This module provides the GuestbookPipeline class that coordinates
configuration, the forms backend client, form selection and normalization
for a single request:

    config -> list forms -> resolve form -> list submissions -> normalize

Configuration and upstream failures short-circuit the remaining stages and
come back as the ``error`` of the PipelineResult. A missing guestbook form is
a successful result with no rows. Any other exception propagates to the
caller.

Usage:
    >>> from guestbook_feed.pipeline import GuestbookPipeline
    >>> pipeline = GuestbookPipeline(client=fake_client)  # doctest: +SKIP
    >>> result = pipeline.run(environ={"NETLIFY_TOKEN": "t"})  # doctest: +SKIP
    >>> result.body()  # doctest: +SKIP
    []
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from guestbook_feed.client import FormsClient, NetlifyFormsClient
from guestbook_feed.config import GuestbookSettings, load_settings
from guestbook_feed.errors import ConfigError, GuestbookError, UpstreamError
from guestbook_feed.normalizer import normalize_submissions
from guestbook_feed.resolver import resolve_form
from guestbook_feed.state_machine import PipelineStateMachine, PipelineTransition
from guestbook_feed.types import ErrorType, FormSummary, OutputRow, PipelineState

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    Attributes:
        rows: Normalized rows, empty on error or when no form was found
        form: The selected guestbook form, if any
        error: Configuration or upstream failure that ended the run
        transitions: Recorded state changes of the run
    """
    rows: List[OutputRow] = field(default_factory=list)
    form: Optional[FormSummary] = None
    error: Optional[GuestbookError] = None
    transitions: List[PipelineTransition] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_type(self) -> Optional[ErrorType]:
        return self.error.error_type if self.error is not None else None

    @property
    def status_code(self) -> int:
        return self.error.status_code if self.error is not None else 200

    def body(self) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        """JSON-ready response body: the row list, or the error payload."""
        if self.error is not None:
            return self.error.to_payload().to_dict()
        return [row.to_dict() for row in self.rows]


class GuestbookPipeline:
    """Runs the guestbook resolution stages for one request.

    The pipeline holds no state between runs; every call to ``run`` reads
    configuration and upstream data afresh.

    Attributes:
        client: Injected forms backend client. When None, a
            NetlifyFormsClient is built from settings for each run and
            closed afterwards.
    """

    def __init__(self, client: Optional[FormsClient] = None):
        self.client = client

    def run(
        self,
        include_spam: bool = False,
        environ: Optional[Mapping[str, str]] = None,
        context: Any = None,
    ) -> PipelineResult:
        """Execute the pipeline.

        Args:
            include_spam: Keep submissions marked as spam
            environ: Environment mapping, defaults to ``os.environ``
            context: Invocation context supplied by the serverless runtime

        Returns:
            PipelineResult with rows or a ConfigError/UpstreamError
        """
        sm = PipelineStateMachine()

        try:
            settings = load_settings(environ, context)
        except ConfigError as exc:
            return self._fail(sm, PipelineState.CONFIG_ERROR, exc)
        sm.transition_to(
            PipelineState.CONFIG_RESOLVED,
            {"site_scope": settings.credential.site_scope},
        )

        if self.client is not None:
            return self._resolve(sm, self.client, settings, include_spam)

        with NetlifyFormsClient.from_settings(settings) as client:
            return self._resolve(sm, client, settings, include_spam)

    def _resolve(
        self,
        sm: PipelineStateMachine,
        client: FormsClient,
        settings: GuestbookSettings,
        include_spam: bool,
    ) -> PipelineResult:
        credential = settings.credential

        try:
            forms = client.list_forms(credential)
        except UpstreamError as exc:
            return self._fail(sm, PipelineState.FORMS_LIST_ERROR, exc)
        sm.transition_to(PipelineState.FORMS_LISTED, {"count": len(forms)})

        form = resolve_form(forms, credential.site_scope)
        if form is None:
            logger.info("No guestbook form among %d forms", len(forms))
            sm.transition_to(PipelineState.FORM_NOT_FOUND)
            sm.transition_to(PipelineState.DONE)
            return PipelineResult(transitions=sm.get_transitions())
        sm.transition_to(PipelineState.FORM_RESOLVED, {"form_id": form.id})

        try:
            submissions = client.list_submissions(form.id, credential)
        except UpstreamError as exc:
            return self._fail(sm, PipelineState.SUBMISSIONS_LIST_ERROR, exc, form=form)
        sm.transition_to(PipelineState.SUBMISSIONS_FETCHED, {"count": len(submissions)})

        rows = normalize_submissions(submissions, include_spam=include_spam)
        sm.transition_to(PipelineState.NORMALIZED, {"count": len(rows)})
        sm.transition_to(PipelineState.DONE)

        logger.info(
            "Resolved %d of %d submissions for form %s",
            len(rows),
            len(submissions),
            form.id,
        )
        return PipelineResult(rows=rows, form=form, transitions=sm.get_transitions())

    def _fail(
        self,
        sm: PipelineStateMachine,
        error_state: PipelineState,
        exc: GuestbookError,
        form: Optional[FormSummary] = None,
    ) -> PipelineResult:
        sm.transition_to(error_state, {"error": exc.message, "type": exc.error_type.value})
        sm.transition_to(PipelineState.DONE)
        return PipelineResult(form=form, error=exc, transitions=sm.get_transitions())


__all__ = [
    "GuestbookPipeline",
    "PipelineResult",
]
