"""GitLab API client for syncing releases."""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import httpx

from gitlab_release.core.errors import NotFoundError, TransportError
from gitlab_release.core.slug import path_escape
from gitlab_release.models.link import ExistingLink
from gitlab_release.models.package import Package
from gitlab_release.models.release import RemoteRelease

GITLAB_BASE_URL = "https://gitlab.com"

# See: https://docs.gitlab.com/ee/api/rest/#offset-based-pagination
MAX_PAGE_SIZE = 100

DISABLED = "disabled"


@dataclass(frozen=True)
class ProjectFeatures:
    """Which GitLab project features are enabled."""

    has_issues: bool
    has_packages: bool
    has_images: bool

    @classmethod
    def from_api_response(cls, data: dict) -> "ProjectFeatures":
        """Create ProjectFeatures from GitLab project API response."""
        return cls(
            has_issues=data.get("issues_access_level") != DISABLED,
            has_packages=(
                data.get("repository_access_level") != DISABLED
                and bool(data.get("packages_enabled"))
            ),
            has_images=data.get("container_registry_access_level") != DISABLED,
        )


class GitLabClient:
    """Client for interacting with the GitLab API of a single project."""

    def __init__(
        self,
        token: str,
        project: str,
        base_url: str = GITLAB_BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.project = project
        self.client = httpx.Client(
            base_url=f"{self.base_url}/api/v4",
            headers={
                "PRIVATE-TOKEN": token,
                "Accept": "application/json",
            },
            timeout=30.0,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.client.close()

    @property
    def _project_path(self) -> str:
        return f"/projects/{path_escape(self.project)}"

    def _request(self, method: str, url: str, message: str, **kwargs) -> httpx.Response:
        """Issue a request, raising TransportError on any failure.

        ``kwargs`` not understood by httpx are attached to the error as details.
        """
        details = {
            key: kwargs.pop(key)
            for key in list(kwargs)
            if key not in ("params", "json")
        }
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(message, reason=str(e), **details) from e

        if response.status_code == 404:
            raise NotFoundError(message, status=404, **details)
        if response.is_error:
            raise TransportError(
                message, status=response.status_code, body=response.text[:500], **details
            )
        return response

    @contextmanager
    def _decoding(self, message: str, status: int | None = None, **details):
        """Raise TransportError when a response body is not what we expect."""
        try:
            yield
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise TransportError(
                message, status=status, reason=f"malformed response: {e!r}", **details
            ) from e

    def _json(self, method: str, url: str, message: str, **kwargs):
        """Issue a request and decode its JSON body."""
        details = {key: value for key, value in kwargs.items() if key not in ("params", "json")}
        response = self._request(method, url, message, **kwargs)
        with self._decoding(message, status=response.status_code, **details):
            return response.json()

    def _paginate(self, url: str, message: str, params: dict | None = None, **details) -> list[dict]:
        """Fetch all pages of a list endpoint."""
        items: list[dict] = []
        page = 1
        while True:
            response = self._request(
                "GET",
                url,
                message,
                params={**(params or {}), "per_page": MAX_PAGE_SIZE, "page": page},
                page=page,
                **details,
            )
            with self._decoding(message, status=response.status_code, page=page, **details):
                data = response.json()
                if not isinstance(data, list):
                    raise TypeError(f"expected a list, got {type(data).__name__}")
                items.extend(data)
                next_page = response.headers.get("X-Next-Page", "")
                if not next_page:
                    break
                page = int(next_page)
        return items

    def _release_path(self, tag: str) -> str:
        return f"{self._project_path}/releases/{path_escape(tag)}"

    def project_features(self) -> ProjectFeatures:
        """Get which issues, packages and Docker images features are enabled."""
        message = "failed to get GitLab project"
        data = self._json("GET", self._project_path, message)
        with self._decoding(message):
            return ProjectFeatures.from_api_response(data)

    def list_milestones(self) -> list[str]:
        """Get all milestone titles of the project.

        GitLab milestones are uniquely identified by their titles.
        """
        message = "failed to list GitLab milestones"
        milestones = self._paginate(f"{self._project_path}/milestones", message)
        with self._decoding(message):
            return [milestone["title"] for milestone in milestones]

    def list_package_files(self, package_id: int, package_name: str) -> list[str]:
        """Get names of all files of a package."""
        message = "failed to list GitLab files for package"
        files = self._paginate(
            f"{self._project_path}/packages/{package_id}/package_files",
            message,
            package=package_name,
        )
        with self._decoding(message, package=package_name):
            return [f["file_name"] for f in files]

    def list_packages(self) -> list[Package]:
        """Get all packages of the project, with files of generic packages."""
        message = "failed to list GitLab packages"
        packages = []
        for data in self._paginate(f"{self._project_path}/packages", message):
            with self._decoding(message):
                generic = data["package_type"] == "generic"
                package_id, package_name = data["id"], data["name"]
            files = self.list_package_files(package_id, package_name) if generic else None
            with self._decoding(message, package=package_name):
                packages.append(Package.from_api_response(data, files))
        return packages

    def list_images(self) -> list[str]:
        """Get locations of all Docker images in all registries of the project."""
        message = "failed to list GitLab Docker images"
        registries = self._paginate(
            f"{self._project_path}/registry/repositories",
            message,
            params={"tags": "true"},
        )
        with self._decoding(message):
            return [
                tag["location"] for registry in registries for tag in registry.get("tags") or []
            ]

    def get_release(self, tag: str) -> RemoteRelease:
        """Get the release for a tag. Raises NotFoundError if there is none."""
        message = "failed to get GitLab release for tag"
        data = self._json("GET", self._release_path(tag), message, tag=tag)
        with self._decoding(message, tag=tag):
            return RemoteRelease.from_api_response(data)

    def list_releases(self) -> list[RemoteRelease]:
        """Get all releases of the project."""
        message = "failed to list GitLab releases"
        releases = self._paginate(f"{self._project_path}/releases", message)
        with self._decoding(message):
            return [RemoteRelease.from_api_response(data) for data in releases]

    def create_release(
        self,
        tag: str,
        name: str,
        description: str,
        milestones: list[str],
        links: list[dict],
        released_at: datetime | None = None,
    ) -> None:
        """Create a release for an existing tag."""
        payload = {
            "tag_name": tag,
            "name": name,
            "description": description,
            "milestones": milestones,
            "assets": {"links": links},
        }
        if released_at is not None:
            payload["released_at"] = released_at.isoformat()
        self._request(
            "POST",
            f"{self._project_path}/releases",
            "failed to create GitLab release for tag",
            json=payload,
            tag=tag,
        )

    def update_release(
        self,
        tag: str,
        name: str,
        description: str,
        milestones: list[str],
        released_at: datetime | None = None,
    ) -> None:
        """Update name, description, release date and milestones of a release."""
        payload = {
            "name": name,
            "description": description,
            "milestones": milestones,
        }
        if released_at is not None:
            payload["released_at"] = released_at.isoformat()
        self._request(
            "PUT",
            self._release_path(tag),
            "failed to update GitLab release for tag",
            json=payload,
            tag=tag,
        )

    def delete_release(self, tag: str) -> None:
        """Delete the release for a tag. The tag itself is kept."""
        self._request(
            "DELETE", self._release_path(tag), "failed to delete GitLab release for tag", tag=tag
        )

    def list_release_links(self, tag: str) -> list[ExistingLink]:
        """Get all asset links of the release for a tag."""
        message = "failed to list GitLab release links for tag"
        links = self._paginate(f"{self._release_path(tag)}/assets/links", message, tag=tag)
        with self._decoding(message, tag=tag):
            return [ExistingLink.from_api_response(data) for data in links]

    def create_release_link(self, tag: str, options: dict) -> None:
        self._request(
            "POST",
            f"{self._release_path(tag)}/assets/links",
            "failed to create GitLab link",
            json=options,
            release=tag,
            link=options["name"],
        )

    def update_release_link(self, tag: str, link_id: int, options: dict) -> None:
        self._request(
            "PUT",
            f"{self._release_path(tag)}/assets/links/{link_id}",
            "failed to update GitLab link",
            json=options,
            release=tag,
            link=options["name"],
        )

    def delete_release_link(self, tag: str, link: ExistingLink) -> None:
        self._request(
            "DELETE",
            f"{self._release_path(tag)}/assets/links/{link.id}",
            "failed to delete GitLab link",
            release=tag,
            link=link.name,
        )
