"""Creating, updating and deleting GitLab releases to mirror the changelog."""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from rich.console import Console

from gitlab_release.core.errors import NotFoundError
from gitlab_release.core.gitlab import GitLabClient
from gitlab_release.models.link import ExistingLink, ExpectedLink, LinkPlan
from gitlab_release.models.package import Package
from gitlab_release.models.release import Release

console = Console(highlight=False, markup=False, soft_wrap=True)

DESCRIPTION_BANNER = (
    "<!-- Automatically generated by gitlab-release tool. DO NOT EDIT. -->\n\n"
)

# GitLab marks releases with release date far from their creation as historical.
HISTORICAL_RELEASE_WINDOW = timedelta(hours=12)


def release_name(release: Release) -> str:
    if release.yanked:
        return f"{release.tag} [YANKED]"
    return release.tag


def release_description(release: Release, images: list[str] | None = None) -> str:
    """Release description: banner, Docker images (if any), then changes."""
    description = DESCRIPTION_BANNER
    if images:
        description += "##### Docker images\n"
        for image in images:
            description += f"* `{image}`\n"
        description += "\n"
    return description + release.changes


def expected_links(packages: Iterable[Package]) -> dict[str, ExpectedLink]:
    """Compute links a release should have for its packages, keyed by name.

    Every file of a generic package gets its own link, other packages are
    linked to their web page. When two links end up with the same name the
    later one wins.
    """
    links: dict[str, ExpectedLink] = {}
    for package in packages:
        if package.generic:
            for file in package.files:
                name = f"{package.name}/{file}"
                links[name] = ExpectedLink(name=name, package=package, file=file)
        else:
            links[package.name] = ExpectedLink(name=package.name, package=package)
    return links


def plan_links(existing: Iterable[ExistingLink], expected: dict[str, ExpectedLink]) -> LinkPlan:
    """Classify links into those to delete, update and create, matching by name."""
    existing_by_name = {link.name: link for link in existing}
    plan = LinkPlan()
    for name, link in existing_by_name.items():
        if name not in expected:
            plan.to_delete.append(link)
    for name, link in expected.items():
        current = existing_by_name.get(name)
        if current is not None:
            plan.to_update.append((current.id, link))
        else:
            plan.to_create.append(link)
    return plan


def sync_links(client: GitLabClient, release: Release, packages: Iterable[Package]) -> None:
    """Update links of the release to match those computed from packages.

    Links which are not expected anymore are deleted first.
    """
    plan = plan_links(client.list_release_links(release.tag), expected_links(packages))
    if plan.is_empty:
        return

    for link in plan.to_delete:
        console.print(f'Deleting GitLab link "{link.name}" for release "{release.tag}".')
        client.delete_release_link(release.tag, link)

    for link_id, link in plan.to_update:
        console.print(f'Updating GitLab link "{link.name}" for release "{release.tag}".')
        client.update_release_link(
            release.tag, link_id, link.to_options(client.base_url, client.project)
        )

    for link in plan.to_create:
        console.print(f'Creating GitLab link "{link.name}" for release "{release.tag}".')
        client.create_release_link(release.tag, link.to_options(client.base_url, client.project))


def _within_window(a: datetime, b: datetime) -> bool:
    return abs(a - b) < HISTORICAL_RELEASE_WINDOW


def upsert(
    client: GitLabClient,
    release: Release,
    released_at: datetime | None,
    milestones: list[str] | None = None,
    packages: list[Package] | None = None,
    images: list[str] | None = None,
    no_create: bool = False,
    now: datetime | None = None,
) -> None:
    """Create or update the GitLab release for a changelog release.

    Milestones, packages and Docker images are those associated with the
    release. With ``no_create`` missing releases are reported but not created.
    """
    milestones = list(milestones or [])
    packages = list(packages or [])
    name = release_name(release)
    description = release_description(release, images)

    try:
        remote = client.get_release(release.tag)
    except NotFoundError:
        if no_create:
            console.print(
                f'GitLab release for tag "{release.tag}" is missing, but not creating it per config.'
            )
            return

        links = [
            link.to_options(client.base_url, client.project)
            for link in expected_links(packages).values()
        ]

        # Do not provide the release date if the release has been done recently,
        # GitLab would mark the release as historical.
        now = now or datetime.now(timezone.utc)
        if released_at is not None and _within_window(now, released_at):
            released_at = None

        console.print(f'Creating GitLab release for tag "{release.tag}".')
        client.create_release(
            release.tag,
            name=name,
            description=description,
            milestones=milestones,
            links=links,
            released_at=released_at,
        )
        return

    # If the GitLab release was made close to the release date, the creation
    # time is used as the release date.
    if (
        released_at is not None
        and remote.created_at is not None
        and _within_window(remote.created_at, released_at)
    ):
        released_at = remote.created_at

    console.print(f'Updating GitLab release for tag "{release.tag}".')
    client.update_release(
        release.tag,
        name=name,
        description=description,
        milestones=milestones,
        released_at=released_at,
    )

    sync_links(client, release, packages)


def prune_releases(client: GitLabClient, releases: Iterable[Release]) -> None:
    """Delete all GitLab releases which are not among releases."""
    keep = {release.tag for release in releases}
    remote = {r.tag_name for r in client.list_releases()}

    for tag in sorted(remote - keep):
        console.print(f'Deleting GitLab release for tag "{tag}".')
        client.delete_release(tag)
