"""Submission filtering and normalization.

Turns raw submissions into OutputRow values the guestbook widget can render
without caring how the form was marked up. This stage is total: it never
raises, and an empty result is a valid result.
"""

from typing import Any, Iterable, List, Mapping, Optional

from guestbook_feed.types import OutputRow, Submission

INCLUDE_SPAM_PARAM = "includeSpam"


def parse_include_spam(query: Optional[Mapping[str, Any]]) -> bool:
    """Read the ``includeSpam`` query parameter.

    Only the exact string ``"true"`` enables spam; anything else, including
    absence, means exclude.

    Examples:
        >>> parse_include_spam({"includeSpam": "true"})
        True
        >>> parse_include_spam({"includeSpam": "TRUE"})
        False
        >>> parse_include_spam(None)
        False
    """
    if not query:
        return False
    return query.get(INCLUDE_SPAM_PARAM) == "true"


def _text(value: Any) -> str:
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_submission(submission: Submission) -> OutputRow:
    """Map one submission onto the output shape.

    ``from`` falls back to ``name``; every text field falls back to "".

    Examples:
        >>> row = normalize_submission(Submission(data={"name": "Ann", "message": "Hi"}))
        >>> (row.name, row.message, row.from_)
        ('Ann', 'Hi', 'Ann')
    """
    data = submission.data or {}
    name = _text(data.get("name"))
    return OutputRow(
        name=name,
        message=_text(data.get("message")),
        from_=_text(data.get("from")) or name,
        created_at=submission.created_at,
        state=submission.state,
    )


def normalize_submissions(
    submissions: Iterable[Submission],
    include_spam: bool = False,
) -> List[OutputRow]:
    """Filter by moderation state and normalize, preserving order.

    Args:
        submissions: Raw submissions in upstream order
        include_spam: Keep submissions the backend marked as spam

    Returns:
        One OutputRow per surviving submission
    """
    return [
        normalize_submission(s)
        for s in submissions
        if include_spam or not s.is_spam
    ]


__all__ = [
    "INCLUDE_SPAM_PARAM",
    "parse_include_spam",
    "normalize_submission",
    "normalize_submissions",
]
