"""Configuration for gitlab-release."""

from dataclasses import dataclass

from gitlab_release.core.gitlab import GITLAB_BASE_URL

DEFAULT_CHANGELOG = "CHANGELOG.md"


@dataclass
class Config:
    """Configuration of a sync run.

    ``project`` can be a project ID or a <namespace/project_path>. When it is
    empty it is inferred from the "origin" remote of the repository.
    """

    token: str
    changelog: str = DEFAULT_CHANGELOG
    project: str | None = None
    base_url: str = GITLAB_BASE_URL
    change_to: str | None = None
    no_create: bool = False

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
