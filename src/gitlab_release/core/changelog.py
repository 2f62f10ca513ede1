"""Reading of changelogs in the Keep a Changelog format.

See: https://keepachangelog.com/en/1.1.0/
"""

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from gitlab_release.core.errors import FormatError

# Matches release headings like:
#   ## [1.0.0] - 2017-06-20
#   ## [0.0.5] - 2014-12-13 [YANKED]
#   ## [Unreleased]
#   ## 1.0.0
_RELEASE_HEADING = re.compile(
    r"^##\s+\[?(?P<version>[^\]\s]+)\]?"
    r"(?:\s+-\s+(?P<date>\d{4}-\d{2}-\d{2}))?"
    r"(?P<yanked>\s+\[YANKED\])?\s*$",
    re.IGNORECASE,
)
_SECTION_HEADING = re.compile(r"^##(?!#)")
_LINK_REFERENCE = re.compile(r"^\[[^\]]+\]:\s*\S+")
_FENCE = re.compile(r"^\s{0,3}(```|~~~)")


@dataclass
class ChangelogEntry:
    """A single release section of a changelog.

    ``body`` holds the lines of the section; the first line is the heading.
    """

    version: str
    date: date | None
    body: list[str]
    yanked: bool = False


def _strip_trailing(lines: list[str], pattern: re.Pattern | None = None) -> list[str]:
    end = len(lines)
    while end > 1:
        line = lines[end - 1]
        if not line.strip() or (pattern is not None and pattern.match(line)):
            end -= 1
            continue
        break
    return lines[:end]


def parse_changelog(text: str, path: str = "") -> list[ChangelogEntry]:
    """Parse changelog text into entries, in the order they appear."""
    entries: list[ChangelogEntry] = []
    current: ChangelogEntry | None = None
    # Opening marker of the fenced code block we are in, headings inside are body lines.
    fence: str | None = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        fence_match = _FENCE.match(line)
        if fence_match is not None:
            if fence is None:
                fence = fence_match.group(1)
            elif fence_match.group(1) == fence:
                fence = None

        if fence is None and _SECTION_HEADING.match(line):
            match = _RELEASE_HEADING.match(line)
            if match is None:
                raise FormatError("cannot parse changelog", path=path, line=lineno)

            release_date = None
            if match.group("date"):
                try:
                    release_date = date.fromisoformat(match.group("date"))
                except ValueError:
                    raise FormatError(
                        "cannot parse changelog", path=path, line=lineno
                    ) from None

            current = ChangelogEntry(
                version=match.group("version"),
                date=release_date,
                body=[line],
                yanked=match.group("yanked") is not None,
            )
            entries.append(current)
        elif current is not None:
            current.body.append(line)

    for i, entry in enumerate(entries):
        last = i == len(entries) - 1
        # Link reference definitions at the end belong to the whole document.
        entry.body = _strip_trailing(entry.body, _LINK_REFERENCE if last else None)

    return entries


def read_changelog(path: str | Path) -> list[ChangelogEntry]:
    """Read and parse a changelog file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise FormatError("cannot read changelog", path=str(path), reason=str(e)) from e
    return parse_changelog(text, str(path))
