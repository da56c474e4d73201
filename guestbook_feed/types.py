"""Core type definitions for the guestbook feed.

This module defines the fundamental types used throughout the pipeline:
- ModerationState: Classification assigned by the forms backend to a submission
- PipelineState: Stages of a single request through the resolution pipeline
- ErrorType: Error categories surfaced to the HTTP caller
- Credential: Bearer token plus optional site scope
- FormSummary: One form owned by the backend account
- Submission: One raw submission as returned by the backend
- OutputRow: The normalized row the guestbook widget renders

All entities are transient and rebuilt for every request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


def _optional_text(value: Any) -> Optional[str]:
    """Stringify an upstream scalar, keeping None as None."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ModerationState(str, Enum):
    """Moderation states assigned by the forms backend.

    Anything the backend reports other than ``verified`` or ``spam`` is
    classified as ``other``.
    """
    VERIFIED = "verified"
    SPAM = "spam"
    OTHER = "other"

    @classmethod
    def classify(cls, raw: Optional[str]) -> "ModerationState":
        """Map a raw upstream state string onto a ModerationState.

        Examples:
            >>> ModerationState.classify("spam")
            <ModerationState.SPAM: 'spam'>
            >>> ModerationState.classify("ham")
            <ModerationState.OTHER: 'other'>
        """
        if raw == cls.VERIFIED.value:
            return cls.VERIFIED
        if raw == cls.SPAM.value:
            return cls.SPAM
        return cls.OTHER


class PipelineState(str, Enum):
    """Pipeline states for a single request.

    Terminal error states: config_error, forms_list_error,
    submissions_list_error. All paths end in done.
    """
    INIT = "init"
    CONFIG_RESOLVED = "config_resolved"
    FORMS_LISTED = "forms_listed"
    FORM_RESOLVED = "form_resolved"
    FORM_NOT_FOUND = "form_not_found"
    SUBMISSIONS_FETCHED = "submissions_fetched"
    NORMALIZED = "normalized"
    DONE = "done"
    CONFIG_ERROR = "config_error"
    FORMS_LIST_ERROR = "forms_list_error"
    SUBMISSIONS_LIST_ERROR = "submissions_list_error"


class ErrorType(str, Enum):
    """Error categories and the way each one reaches the caller."""
    CONFIG = "config"
    UPSTREAM = "upstream"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Credential:
    """Authentication material for the forms backend.

    Attributes:
        token: Personal access token, never empty
        site_scope: Optional site identifier restricting the form listing

    Examples:
        >>> cred = Credential(token="abc", site_scope="site-1")
        >>> cred.auth_headers()
        {'Authorization': 'Bearer abc'}
    """
    token: str
    site_scope: Optional[str] = None

    def __post_init__(self):
        if not self.token:
            raise ValueError("Credential token must not be empty")
        if self.site_scope == "":
            object.__setattr__(self, "site_scope", None)

    def auth_headers(self) -> Dict[str, str]:
        """Build the bearer Authorization header."""
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        return f"Credential(token='***', site_scope={self.site_scope!r})"


@dataclass(frozen=True)
class FormSummary:
    """One form owned by the backend account.

    Attributes:
        id: Upstream form identifier
        name: Form name as declared in the site markup
        site_id: Identifier of the site the form belongs to
    """
    id: str
    name: str = ""
    site_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict using the upstream key names."""
        result: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.site_id is not None:
            result["site_id"] = self.site_id
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormSummary":
        """Create FormSummary from an upstream form object."""
        return cls(
            id=str(data["id"]),
            name=_optional_text(data.get("name")) or "",
            site_id=_optional_text(data.get("site_id")),
        )


@dataclass(frozen=True)
class Submission:
    """One raw submission belonging to a form.

    ``data`` is the arbitrary key/value bag filled in by whoever submitted
    the form. Only ``name``, ``message`` and ``from`` are recognized
    downstream.

    Attributes:
        data: Submitted field values, empty when the backend sent none
        created_at: Upstream creation timestamp, passed through verbatim
        state: Raw moderation state string from the backend
    """
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    state: Optional[str] = None

    @property
    def moderation(self) -> ModerationState:
        return ModerationState.classify(self.state)

    @property
    def is_spam(self) -> bool:
        return self.moderation == ModerationState.SPAM

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict using the upstream key names."""
        result: Dict[str, Any] = {"data": dict(self.data)}
        if self.created_at is not None:
            result["created_at"] = self.created_at
        if self.state is not None:
            result["state"] = self.state
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Submission":
        """Create Submission from an upstream submission object.

        A missing, null or non-object ``data`` member becomes an empty
        mapping. Non-string ``created_at`` and ``state`` values are
        stringified.
        """
        fields = data.get("data")
        if not isinstance(fields, dict):
            fields = {}
        return cls(
            data=dict(fields),
            created_at=_optional_text(data.get("created_at")),
            state=_optional_text(data.get("state")),
        )


@dataclass(frozen=True)
class OutputRow:
    """A normalized guestbook entry, the only shape the widget ever sees.

    Attributes:
        name: Author name, empty string when absent
        message: Message body, empty string when absent
        from_: Where the author is writing from, defaults to ``name``
        created_at: Upstream creation timestamp, omitted when unknown
        state: Upstream moderation state, omitted when unknown

    Examples:
        >>> row = OutputRow(name="Ann", message="Hi", from_="Ann",
        ...                 created_at="2024-01-01", state="verified")
        >>> row.to_dict()["from"]
        'Ann'
    """
    name: str
    message: str
    from_: str
    created_at: Optional[str] = None
    state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        result: Dict[str, Any] = {
            "name": self.name,
            "message": self.message,
            "from": self.from_,
        }
        if self.created_at is not None:
            result["created_at"] = self.created_at
        if self.state is not None:
            result["state"] = self.state
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputRow":
        """Create OutputRow from its wire representation."""
        return cls(
            name=data.get("name", ""),
            message=data.get("message", ""),
            from_=data.get("from", ""),
            created_at=data.get("created_at"),
            state=data.get("state"),
        )


__all__ = [
    "ModerationState",
    "PipelineState",
    "ErrorType",
    "Credential",
    "FormSummary",
    "Submission",
    "OutputRow",
]
