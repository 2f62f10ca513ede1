"""Release asset link models."""

from dataclasses import dataclass, field

from gitlab_release.core.slug import path_escape
from gitlab_release.models.package import Package


@dataclass(frozen=True)
class ExistingLink:
    """A release link which already exists in GitLab."""

    id: int
    name: str

    @classmethod
    def from_api_response(cls, data: dict) -> "ExistingLink":
        """Create ExistingLink from GitLab API response."""
        return cls(id=data["id"], name=data["name"])


@dataclass(frozen=True)
class ExpectedLink:
    """A release link computed from a package.

    Links to generic package files have ``file`` set, links to other
    packages point to the package's web page.
    """

    name: str
    package: Package
    file: str | None = None

    @property
    def link_type(self) -> str:
        return "package" if self.file is None else "other"

    @property
    def direct_asset_path(self) -> str | None:
        if self.file is None:
            return None
        return f"/{self.name}"

    def url(self, base_url: str, project: str) -> str:
        """Target URL of the link."""
        base_url = base_url.rstrip("/")
        if self.file is None:
            return base_url + self.package.web_path
        return (
            f"{base_url}/api/v4/projects/{path_escape(project)}/packages/generic/"
            f"{path_escape(self.package.name)}/{path_escape(self.package.version)}/"
            f"{path_escape(self.file)}"
        )

    def to_options(self, base_url: str, project: str) -> dict:
        """Options for creating or updating the link through the API."""
        options = {
            "name": self.name,
            "url": self.url(base_url, project),
            "link_type": self.link_type,
        }
        if self.direct_asset_path is not None:
            options["direct_asset_path"] = self.direct_asset_path
        return options


@dataclass
class LinkPlan:
    """Operations needed to make existing links match expected links."""

    to_delete: list[ExistingLink] = field(default_factory=list)
    to_update: list[tuple[int, ExpectedLink]] = field(default_factory=list)
    to_create: list[ExpectedLink] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_update or self.to_create)
