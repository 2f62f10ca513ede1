"""Matching of milestones, packages and Docker images to release tags.

Resources are associated with a release when they contain the release's tag
(or a transformation of it) as a substring. Longer tags are tried first so
that "1.0.0-rc" is matched to tag "v1.0.0-rc" when such a tag exists, and
only falls back to "v1.0.0" otherwise.
"""

from collections.abc import Callable, Iterable
from typing import TypeVar

from gitlab_release.core.slug import slugify
from gitlab_release.models.package import Package
from gitlab_release.models.release import Release

TAG_PREFIX = "v"

T = TypeVar("T")


def no_change(s: str) -> str:
    return s


def remove_prefix(s: str) -> str:
    """Remove the "v" prefix from the beginning of the string."""
    return s.removeprefix(TAG_PREFIX)


def remove_prefix_and_slugify(s: str) -> str:
    return slugify(remove_prefix(s))


TAG_TRANSFORMATIONS: tuple[Callable[[str], str], ...] = (
    no_change,
    remove_prefix,
    slugify,
    remove_prefix_and_slugify,
)


def _ordered_tags(releases: Iterable[Release]) -> list[str]:
    # Regular sort first for deterministic results, then longest tags first.
    tags = sorted(release.tag for release in releases)
    return sorted(tags, key=len, reverse=True)


def _match(
    items: list[T],
    releases: Iterable[Release],
    key: Callable[[T], str],
    identity: Callable[[T], object],
) -> dict[str, list[T]]:
    tags = _ordered_tags(releases)
    owners: dict[object, str] = {}
    tags_to_items: dict[str, list[T]] = {}

    for transformation in TAG_TRANSFORMATIONS:
        for tag in tags:
            needle = transformation(tag)
            for item in items:
                item_id = identity(item)
                if item_id in owners:
                    continue
                if needle in key(item):
                    tags_to_items.setdefault(tag, []).append(item)
                    owners[item_id] = tag

    return tags_to_items


def match_to_tags(inputs: Iterable[str], releases: Iterable[Release]) -> dict[str, list[str]]:
    """Map input strings to releases' tags.

    Each input is assigned to at most one tag. Inputs matching no tag are
    not present in the result, neither are tags without any inputs.
    """
    return _match(sorted(inputs), releases, key=no_change, identity=no_change)


def match_packages_to_tags(
    packages: Iterable[Package], releases: Iterable[Release]
) -> dict[str, list[Package]]:
    """Map packages to releases' tags based on package versions."""
    ordered = sorted(packages, key=lambda p: p.version)
    return _match(ordered, releases, key=lambda p: p.version, identity=lambda p: p.id)


def match_milestones_to_tags(
    milestones: Iterable[str], releases: Iterable[Release]
) -> dict[str, list[str]]:
    """Map milestone titles to releases' tags."""
    return match_to_tags(milestones, releases)


def match_images_to_tags(images: Iterable[str], releases: Iterable[Release]) -> dict[str, list[str]]:
    """Map Docker image locations to releases' tags."""
    return match_to_tags(images, releases)
