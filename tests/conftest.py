"""Shared fixtures: an in-memory GitLab and throwaway git repositories."""

import json
import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from gitlab_release.core.gitlab import GitLabClient

PROJECT = "group/project"
BASE_URL = "https://gitlab.example.com"


class FakeGitLab:
    """In-memory GitLab project serving the subset of the API we use."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.page_size = 100
        self.project = {
            "issues_access_level": "enabled",
            "repository_access_level": "enabled",
            "packages_enabled": True,
            "container_registry_access_level": "enabled",
        }
        self.milestones: list[str] = []
        self.packages: list[dict] = []
        self.package_files: dict[int, list[str]] = {}
        self.registries: list[dict] = []
        self.releases: dict[str, dict] = {}
        self.requests: list[tuple[str, str, dict | None]] = []
        self.fail: dict[tuple[str, str], int] = {}
        self._next_link_id = 1

    # Helpers for tests.

    def add_release(self, tag: str, created_at: datetime | None = None, links=()) -> dict:
        release = {
            "tag_name": tag,
            "name": tag,
            "description": "",
            "created_at": (created_at or self.now).isoformat(),
            "released_at": (created_at or self.now).isoformat(),
            "milestones": [],
            "links": [],
        }
        self.releases[tag] = release
        for name in links:
            self._add_link(release, {"name": name, "url": "https://old.example.com"})
        return release

    def add_package(self, id: int, name: str, version: str, package_type="generic", files=()):
        self.packages.append(
            {
                "id": id,
                "name": name,
                "version": version,
                "package_type": package_type,
                "_links": {"web_path": f"/{PROJECT}/-/packages/{id}"},
            }
        )
        self.package_files[id] = list(files)

    def mutations(self) -> list[tuple[str, str]]:
        return [(method, path) for method, path, _ in self.requests if method != "GET"]

    def client(self) -> GitLabClient:
        return GitLabClient(
            "secret", PROJECT, base_url=BASE_URL, transport=httpx.MockTransport(self.handle)
        )

    # Request handling.

    def _add_link(self, release: dict, data: dict) -> dict:
        link = {"id": self._next_link_id, **data}
        self._next_link_id += 1
        release["links"].append(link)
        return link

    def _page(self, request: httpx.Request, items: list) -> httpx.Response:
        per_page = min(int(request.url.params.get("per_page", 20)), self.page_size)
        page = int(request.url.params.get("page", 1))
        start = (page - 1) * per_page
        next_page = str(page + 1) if start + per_page < len(items) else ""
        return httpx.Response(
            200, json=items[start : start + per_page], headers={"X-Next-Page": next_page}
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        assert request.headers["PRIVATE-TOKEN"] == "secret"
        prefix = f"/api/v4/projects/{PROJECT}"
        assert request.url.path.startswith(prefix)
        path = request.url.path[len(prefix) :]
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        status = self.fail.get((request.method, path))
        if status is not None:
            return httpx.Response(status, json={"message": "failure"})

        parts = [p for p in path.split("/") if p]
        method = request.method

        if not parts:
            return httpx.Response(200, json=self.project)
        if parts == ["milestones"]:
            return self._page(request, [{"title": t} for t in self.milestones])
        if parts == ["packages"]:
            return self._page(request, self.packages)
        if parts[0] == "packages" and parts[2:] == ["package_files"]:
            files = self.package_files[int(parts[1])]
            return self._page(request, [{"file_name": f} for f in files])
        if parts == ["registry", "repositories"]:
            assert request.url.params.get("tags") == "true"
            return self._page(request, self.registries)
        if parts == ["releases"]:
            if method == "GET":
                return self._page(request, list(self.releases.values()))
            return self._create_release(body)
        if parts[0] == "releases":
            tag = parts[1]
            release = self.releases.get(tag)
            if release is None:
                return httpx.Response(404, json={"message": "404 Not Found"})
            rest = parts[2:]
            if not rest:
                if method == "GET":
                    return httpx.Response(200, json=release)
                if method == "PUT":
                    release.update(body)
                    return httpx.Response(200, json=release)
                if method == "DELETE":
                    del self.releases[tag]
                    return httpx.Response(200, json=release)
            if rest == ["assets", "links"]:
                if method == "GET":
                    return self._page(request, release["links"])
                return httpx.Response(201, json=self._add_link(release, body))
            if rest[:2] == ["assets", "links"] and len(rest) == 3:
                link_id = int(rest[2])
                link = next((l for l in release["links"] if l["id"] == link_id), None)
                if link is None:
                    return httpx.Response(404, json={"message": "404 Not Found"})
                if method == "PUT":
                    link.update(body)
                    return httpx.Response(200, json=link)
                if method == "DELETE":
                    release["links"].remove(link)
                    return httpx.Response(200, json=link)
        return httpx.Response(400, json={"message": f"unexpected {method} {path}"})

    def _create_release(self, body: dict) -> httpx.Response:
        release = self.add_release(body["tag_name"])
        release["name"] = body["name"]
        release["description"] = body["description"]
        release["milestones"] = body["milestones"]
        if "released_at" in body:
            release["released_at"] = body["released_at"]
        for link in body["assets"]["links"]:
            self._add_link(release, link)
        return httpx.Response(201, json=release)


@pytest.fixture
def gitlab() -> FakeGitLab:
    return FakeGitLab()


def git(repo: Path, *args: str, date: str | None = None) -> str:
    env = {
        **os.environ,
        "GIT_CONFIG_NOSYSTEM": "1",
        "GIT_CONFIG_GLOBAL": os.devnull,
        "GIT_AUTHOR_NAME": "John Doe",
        "GIT_AUTHOR_EMAIL": "john@doe.org",
        "GIT_COMMITTER_NAME": "John Doe",
        "GIT_COMMITTER_EMAIL": "john@doe.org",
    }
    if date is not None:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
    result = subprocess.run(
        ["git", *args], cwd=repo, env=env, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    git(path, "init", "-q")
    return path


def commit_and_tag(repo: Path, tag: str, date: str, annotated: bool = False) -> None:
    (repo / "file.txt").write_text(f"Data: {tag}")
    git(repo, "add", "file.txt")
    git(repo, "commit", "-q", "-m", f"Change for {tag}", date=date)
    if annotated:
        git(repo, "tag", "-a", tag, "-m", tag, date=date)
    else:
        git(repo, "tag", tag, date=date)
