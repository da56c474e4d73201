"""Guestbook feed for static sites.

A serverless endpoint that reads the public entries of a site's "guestbook"
form from the Netlify Forms API and returns them in a stable shape for a
frontend widget:
- Locates the guestbook form, preferring the configured site
- Fetches its submissions and drops spam unless asked otherwise
- Normalizes every entry to name, message, from, created_at and state
- Maps configuration and upstream failures onto JSON error responses

Basic usage:
    >>> from guestbook_feed import handler
    >>> response = handler({"httpMethod": "OPTIONS"}, None)
    >>> response["statusCode"]
    204
"""

__version__ = "0.1.0"
__author__ = "Guestbook Feed Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from guestbook_feed.handler import handler
from guestbook_feed.pipeline import GuestbookPipeline, PipelineResult

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "handler",
    "GuestbookPipeline",
    "PipelineResult",
]
