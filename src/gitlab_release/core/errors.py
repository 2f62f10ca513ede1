"""Errors raised while syncing releases."""


class ReleaseError(Exception):
    """Base error for the release tool.

    Carries a human readable message and a mapping of details which are
    rendered after the message.
    """

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} ({rendered})"


class FormatError(ReleaseError):
    """The changelog does not have the required shape."""

    pass


class ConsistencyError(ReleaseError):
    """Changelog releases and git tags do not match.

    ``kind`` is "releases" for changelog releases missing among git tags and
    "tags" for git tags missing among changelog releases.
    """

    def __init__(self, message: str, kind: str, names: list[str]):
        super().__init__(message, **{kind: names})
        self.kind = kind
        self.names = names


class TransportError(ReleaseError):
    """A git or GitLab API call failed."""

    def __init__(self, message: str, status: int | None = None, **details):
        if status is not None:
            details["status"] = status
        super().__init__(message, **details)
        self.status = status


class NotFoundError(TransportError):
    """GitLab responded with 404 for a single resource lookup."""

    pass
