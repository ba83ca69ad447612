"""Markdown changelog generated from version-control history."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..bundle.utils import write_text
from .history import HistoryToken, parse_history

_MARKDOWN_SPECIAL = re.compile(r"([\\`*_\[\]])")


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


@dataclass(slots=True)
class ChangeEntry:
    commit_hash: str
    subject: str
    author: str

    def render(self, git_url: str) -> str:
        link = f"{git_url.rstrip('/')}/commit/{self.commit_hash}"
        return f"* [{self.commit_hash}]({link}) - {escape_markdown(self.subject)} ({escape_markdown(self.author)})"


@dataclass(slots=True)
class ReleaseSection:
    """A run of entries headed by a release tag, or by the current build."""

    version: str
    date: str
    tag: Optional[str] = None
    entries: List[ChangeEntry] = field(default_factory=list)

    def render_header(self, artifact_url: str) -> str:
        if self.tag is None:
            return f"## Build {escape_markdown(self.version)} ({self.date})"
        return f"## Release [{self.tag}]({artifact_url.rstrip('/')}/{self.tag}) ({self.date})"


@dataclass(slots=True)
class ChangeLogDocument:
    sections: List[ReleaseSection] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return sum(len(section.entries) for section in self.sections)

    def render(self, *, artifact_url: str, git_url: str) -> str:
        blocks: List[str] = []
        for section in self.sections:
            lines = [section.render_header(artifact_url), ""]
            lines.extend(entry.render(git_url) for entry in section.entries)
            blocks.append("\n".join(lines).rstrip("\n"))
        return "\n\n".join(blocks) + "\n"


@dataclass
class ChangeLogGenerator:
    """Turns ``refNames|date|hash|author|subject`` records into release sections.

    Records are kept in input order. A record whose ref names carry a ``vX.Y.Z``
    tag opens a new release section and is also listed as that section's first
    entry. Subjects that look like no-op merge bubbles are dropped unless
    ``keep_merges`` is set.
    """

    artifact_url: str = ""
    git_url: str = ""
    keep_merges: bool = False

    def build(self, history: str, *, version: str, timestamp: datetime) -> ChangeLogDocument:
        current = ReleaseSection(version=version, date=timestamp.strftime("%Y-%m-%d %H:%M:%S %z").strip())
        document = ChangeLogDocument(sections=[current])

        for token in parse_history(history):
            tag = token.release_tag
            if tag is not None:
                current = ReleaseSection(version=tag, date=token.committer_date, tag=tag)
                document.sections.append(current)
            if self._keep(token):
                current.entries.append(
                    ChangeEntry(commit_hash=token.commit_hash, subject=token.subject, author=token.committer_name)
                )
        return document

    def render(self, history: str, *, version: str, timestamp: datetime) -> str:
        document = self.build(history, version=version, timestamp=timestamp)
        return document.render(artifact_url=self.artifact_url, git_url=self.git_url)

    def write(self, path: Path, history: str, *, version: str, timestamp: datetime) -> Path:
        write_text(path, self.render(history, version=version, timestamp=timestamp))
        return path

    def _keep(self, token: HistoryToken) -> bool:
        return self.keep_merges or not token.is_noop_merge
