"""CLI entry point for gitlab-release."""

import os

import click
from rich.console import Console

from gitlab_release import __version__
from gitlab_release.core.config import DEFAULT_CHANGELOG, Config
from gitlab_release.core.errors import ReleaseError
from gitlab_release.core.gitlab import GITLAB_BASE_URL
from gitlab_release.core.sync import sync

EXIT_CODE = 2

err_console = Console(stderr=True, highlight=False, markup=False, soft_wrap=True)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name="gitlab-release")
@click.option(
    "--change-to",
    "-C",
    envvar="CI_PROJECT_DIR",
    metavar="PATH",
    type=click.Path(exists=True, file_okay=False),
    help="Run as if started in PATH instead of the current working directory. "
    "Environment variable: CI_PROJECT_DIR",
)
@click.option(
    "--project",
    "-p",
    envvar="CI_PROJECT_ID",
    help="GitLab project to release to. It can be project ID or <namespace/project_path>. "
    "By default it infers it from the repository. Environment variable: CI_PROJECT_ID",
)
@click.option(
    "--base",
    "-B",
    "base_url",
    envvar="CI_SERVER_URL",
    default=GITLAB_BASE_URL,
    show_default=True,
    metavar="URL",
    help="Base URL for GitLab API to use. Environment variable: CI_SERVER_URL",
)
@click.option(
    "--token",
    "-t",
    envvar="GITLAB_API_TOKEN",
    required=True,
    help="GitLab API token to use. Environment variable: GITLAB_API_TOKEN",
)
@click.option(
    "--changelog",
    "-f",
    default=DEFAULT_CHANGELOG,
    show_default=True,
    metavar="PATH",
    help="Path to the changelog file to use.",
)
@click.option(
    "--no-create",
    is_flag=True,
    help="Do not create missing releases, only update and delete existing ones.",
)
def main(
    change_to: str | None,
    project: str | None,
    base_url: str,
    token: str,
    changelog: str,
    no_create: bool,
):
    """Sync tags in your git repository and a changelog in Keep a Changelog
    format with releases of your GitLab project.

    You can provide some configuration options as environment variables.
    """
    config = Config(
        token=token,
        changelog=changelog,
        project=project or None,
        base_url=base_url,
        change_to=change_to,
        no_create=no_create,
    )

    if config.change_to:
        os.chdir(config.change_to)

    try:
        sync(config)
    except ReleaseError as e:
        err_console.print(f"error: {e}")
        raise SystemExit(EXIT_CODE)


if __name__ == "__main__":
    main()
