"""Syncing of changelog releases and git tags with GitLab releases."""

from datetime import datetime

from gitlab_release.core.config import Config
from gitlab_release.core.git import infer_project
from gitlab_release.core.gitlab import GitLabClient
from gitlab_release.core.matcher import (
    match_images_to_tags,
    match_milestones_to_tags,
    match_packages_to_tags,
)
from gitlab_release.core.reconciler import load_releases, load_tags, reconcile, tags_to_dates
from gitlab_release.core.releases import prune_releases, upsert
from gitlab_release.models.package import Package


def sync(config: Config, client: GitLabClient | None = None, now: datetime | None = None) -> None:
    """Sync the changelog and git tags with releases of the GitLab project.

    Creates missing releases, updates existing ones and deletes releases
    which are not in the changelog anymore. The changelog and tags are
    checked against each other before GitLab is contacted at all.
    """
    repo_path = "."
    releases = load_releases(config.changelog)
    tags = load_tags(repo_path)
    reconcile(releases, tags)

    if not config.project:
        config.project = infer_project(repo_path)

    if client is None:
        client = GitLabClient(config.token, config.project, base_url=config.base_url)

    with client:
        features = client.project_features()

        tags_to_milestones: dict[str, list[str]] = {}
        if features.has_issues:
            tags_to_milestones = match_milestones_to_tags(client.list_milestones(), releases)

        tags_to_packages: dict[str, list[Package]] = {}
        if features.has_packages:
            tags_to_packages = match_packages_to_tags(client.list_packages(), releases)

        tags_to_images: dict[str, list[str]] = {}
        if features.has_images:
            tags_to_images = match_images_to_tags(client.list_images(), releases)

        dates = tags_to_dates(tags)

        for release in releases:
            upsert(
                client,
                release,
                dates.get(release.tag),
                milestones=tags_to_milestones.get(release.tag),
                packages=tags_to_packages.get(release.tag),
                images=tags_to_images.get(release.tag),
                no_create=config.no_create,
                now=now,
            )

        prune_releases(client, releases)
