"""Guestbook form selection.

Picks the one form named "guestbook" (case-insensitive) out of a forms
listing. When a site scope is known, a form on that site wins over a form
of the same name on another site; without a scope, listing order decides.
Returning None is a normal outcome, not an error.
"""

from typing import Iterable, List, Optional

from guestbook_feed.types import FormSummary

GUESTBOOK_FORM_NAME = "guestbook"


def is_guestbook(form: FormSummary, name: str = GUESTBOOK_FORM_NAME) -> bool:
    """Case-insensitive name match.

    Examples:
        >>> is_guestbook(FormSummary(id="f1", name="GuestBook"))
        True
        >>> is_guestbook(FormSummary(id="f2", name="contact"))
        False
    """
    return (form.name or "").lower() == name.lower()


def resolve_form(
    forms: Iterable[FormSummary],
    site_scope: Optional[str] = None,
    name: str = GUESTBOOK_FORM_NAME,
) -> Optional[FormSummary]:
    """Select the guestbook form from a listing.

    Args:
        forms: Forms in upstream listing order
        site_scope: Site the request is scoped to, if any
        name: Form name to look for

    Returns:
        The selected form, or None when no form matches

    Examples:
        >>> forms = [
        ...     FormSummary(id="a", name="guestbook", site_id="other"),
        ...     FormSummary(id="b", name="Guestbook", site_id="mine"),
        ... ]
        >>> resolve_form(forms, site_scope="mine").id
        'b'
        >>> resolve_form(forms).id
        'a'
        >>> resolve_form(forms, site_scope="missing").id
        'a'
    """
    matches: List[FormSummary] = [f for f in forms if is_guestbook(f, name)]
    if not matches:
        return None

    if site_scope:
        for form in matches:
            if form.site_id == site_scope:
                return form

    return matches[0]


__all__ = [
    "GUESTBOOK_FORM_NAME",
    "is_guestbook",
    "resolve_form",
]
