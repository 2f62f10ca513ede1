"""gitlab-release - sync a changelog and git tags with GitLab releases."""

__version__ = "0.1.0"
