"""Slugs and path escaping compatible with GitLab."""

import re
from urllib.parse import quote

SLUG_MAX_LENGTH = 63

_SLUG_CLEANUP = re.compile(r"[^a-z0-9]+")
_SLUG_TRIM = re.compile(r"\A-+|-+\Z")


def slugify(s: str) -> str:
    """Make a slug from the string, matching what GitLab uses for ref slugs.

    See: https://gitlab.com/gitlab-org/gitlab/-/blob/c61e4166/lib/gitlab/utils.rb#L73-84
    """
    s = _SLUG_CLEANUP.sub("-", s.lower())
    # Trim after truncating, truncation can leave a trailing "-".
    s = s[:SLUG_MAX_LENGTH]
    return _SLUG_TRIM.sub("", s)


def path_escape(s: str) -> str:
    """Escape a value to be used as a single GitLab API path segment."""
    return quote(s, safe="").replace(".", "%2E")
