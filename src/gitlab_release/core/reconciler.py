"""Loading of changelog releases and git tags, and checking they match."""

from datetime import datetime
from pathlib import Path

from gitlab_release.core.changelog import read_changelog
from gitlab_release.core.errors import ConsistencyError, FormatError
from gitlab_release.core.git import list_tags
from gitlab_release.core.matcher import TAG_PREFIX
from gitlab_release.models.release import Release, Tag


def load_releases(path: str | Path) -> list[Release]:
    """Extract releases from a changelog file at path.

    The "Unreleased" section is skipped. Versions in the changelog must not
    be prefixed with "v" and every release must have a date.
    """
    releases = []
    for entry in read_changelog(path):
        if entry.version.lower() == "unreleased":
            continue
        if entry.version.startswith(TAG_PREFIX):
            raise FormatError(
                f'release in the changelog starts with "{TAG_PREFIX}", but it should not',
                release=entry.version,
            )
        if entry.date is None:
            raise FormatError("release in the changelog is missing date", release=entry.version)

        releases.append(
            Release(
                tag=TAG_PREFIX + entry.version,
                changes="\n".join(entry.body[1:]),
                yanked=entry.yanked,
            )
        )
    return releases


def load_tags(repo_path: str | Path) -> list[Tag]:
    """Obtain all tags from the git repository at repo_path."""
    return list_tags(repo_path)


def reconcile(releases: list[Release], tags: list[Tag]) -> None:
    """Raise ConsistencyError if releases do not exactly match tags.

    Changelog releases missing among git tags are reported first; git tags
    missing among changelog releases are only reported when there are none.
    """
    all_releases = {release.tag for release in releases}
    all_tags = {tag.name for tag in tags}

    extra_releases = all_releases - all_tags
    if extra_releases:
        raise ConsistencyError(
            "found changelog releases not among git tags", "releases", sorted(extra_releases)
        )

    extra_tags = all_tags - all_releases
    if extra_tags:
        raise ConsistencyError(
            "found git tags not among changelog releases", "tags", sorted(extra_tags)
        )


def tags_to_dates(tags: list[Tag]) -> dict[str, datetime]:
    """Map tag names to their dates."""
    return {tag.name: tag.date for tag in tags}
