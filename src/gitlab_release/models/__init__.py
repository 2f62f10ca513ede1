"""Data models for gitlab-release."""

from gitlab_release.models.link import ExistingLink, ExpectedLink, LinkPlan
from gitlab_release.models.package import Package
from gitlab_release.models.release import Release, RemoteRelease, Tag

__all__ = [
    "ExistingLink",
    "ExpectedLink",
    "LinkPlan",
    "Package",
    "Release",
    "RemoteRelease",
    "Tag",
]
