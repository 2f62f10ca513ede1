"""Reading tags and remotes of a local git repository."""

import re
import subprocess
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse

from gitlab_release.core.errors import TransportError
from gitlab_release.models.release import Tag

GIT_TIMEOUT_SECONDS = 30.0

# Tag name, tagger date (empty for lightweight tags), author date of the tagged commit.
_TAG_FORMAT = "%(refname:strip=2)%09%(taggerdate:iso-strict)%09%(*authordate:iso-strict)%09%(authordate:iso-strict)"

# scp-like syntax: [user@]host:path
_SCP_URL = re.compile(r"^(?:[^@/]+@)?[^:/]+:(?P<path>[^/].*)$")


def run_git(args: list[str], path: str | Path) -> str:
    """Run a git command in the repository at path and return its stdout."""
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=path,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise TransportError(
            "cannot run git", command=" ".join(cmd), path=str(path), reason=str(e)
        ) from e

    if result.returncode != 0:
        raise TransportError(
            "git command failed",
            command=" ".join(cmd),
            path=str(path),
            stderr=result.stderr.strip(),
        )
    return result.stdout


def list_tags(path: str | Path) -> list[Tag]:
    """Obtain all tags from the git repository at path.

    Annotated tags are dated with the tagger's date, lightweight tags
    with the author date of the commit they point to.
    """
    output = run_git(["for-each-ref", f"--format={_TAG_FORMAT}", "refs/tags"], path)

    tags = []
    for line in output.splitlines():
        if not line.strip():
            continue
        name, tagger_date, peeled_author_date, author_date = line.split("\t")
        when = tagger_date or peeled_author_date or author_date
        if not when:
            raise TransportError("cannot determine date of git tag", tag=name, path=str(path))
        tags.append(Tag(name=name, date=datetime.fromisoformat(when)))
    return tags


def remote_url(path: str | Path, remote: str = "origin") -> str:
    """Get the URL of a remote of the git repository at path."""
    url = run_git(["remote", "get-url", remote], path).strip()
    if not url:
        raise TransportError("cannot obtain git remote URL", remote=remote, path=str(path))
    return url


def infer_project_path(url: str) -> str:
    """Infer a GitLab project path from a git remote URL.

    Accepts:
    - https://gitlab.com/group/project.git
    - ssh://git@gitlab.com/group/project.git
    - git@gitlab.com:group/project.git
    """
    if "://" in url:
        project_path = urlparse(url).path
    else:
        match = _SCP_URL.match(url)
        project_path = match.group("path") if match else url

    project_path = project_path.removesuffix(".git")
    return project_path.lstrip("/")


def infer_project(path: str | Path) -> str:
    """Infer a GitLab project path from the "origin" remote of the repository at path."""
    return infer_project_path(remote_url(path))
