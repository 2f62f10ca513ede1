"""Package data model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Package:
    """Represents a GitLab project's package.

    Generic packages have files which are linked directly, while
    non-generic packages have a web path to which we just link.

    See: https://docs.gitlab.com/ee/user/packages/package_registry/
    """

    id: int
    generic: bool
    web_path: str
    name: str
    version: str
    files: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_api_response(cls, data: dict, files: list[str] | None = None) -> "Package":
        """Create Package from GitLab API response.

        Names of non-generic packages are prefixed with their package type
        so that packages of different types with the same name do not clash.
        """
        web_path = data.get("_links", {}).get("web_path", "")
        if data["package_type"] == "generic":
            return cls(
                id=data["id"],
                generic=True,
                web_path=web_path,
                name=data["name"],
                version=data["version"],
                files=tuple(files or ()),
            )
        return cls(
            id=data["id"],
            generic=False,
            web_path=web_path,
            name=f"{data['package_type']}/{data['name']}",
            version=data["version"],
        )
