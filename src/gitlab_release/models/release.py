"""Release and tag data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Release:
    """A release extracted from a Keep a Changelog changelog.

    ``tag`` is the changelog version with the "v" prefix added and
    ``changes`` is the body of the changelog entry without its heading.
    """

    tag: str
    changes: str = ""
    yanked: bool = False


@dataclass(frozen=True)
class Tag:
    """A git tag with its tagger (or commit author) date."""

    name: str
    date: datetime


@dataclass
class RemoteRelease:
    """Represents a GitLab release."""

    tag_name: str
    name: str
    created_at: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "RemoteRelease":
        """Create RemoteRelease from GitLab API response."""
        created_at = data.get("created_at")
        return cls(
            tag_name=data["tag_name"],
            name=data.get("name") or data["tag_name"],
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
