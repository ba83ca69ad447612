"""Parsing of pipe-delimited ``git log`` records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from ..tools import trim_output

FIELD_SEPARATOR = "|"
FIELD_COUNT = 5

TAG_PATTERN = re.compile(r"tag: (v[0-9]+\.[0-9]+\.[0-9]+)")


@dataclass(frozen=True, slots=True)
class HistoryToken:
    ref_names: str
    committer_date: str
    commit_hash: str
    committer_name: str
    subject: str

    @property
    def release_tag(self) -> Optional[str]:
        """Return the ``vX.Y.Z`` tag named in the ref names, if any."""

        match = TAG_PATTERN.search(self.ref_names)
        return match.group(1) if match else None

    @property
    def is_noop_merge(self) -> bool:
        return "Merge branch" in self.subject and "into" in self.subject


def parse_line(line: str) -> Optional[HistoryToken]:
    """Split one record; lines with fewer than five fields are dropped.

    A subject containing the separator keeps its remaining text.
    """

    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < FIELD_COUNT:
        return None
    subject = FIELD_SEPARATOR.join(fields[FIELD_COUNT - 1:])
    return HistoryToken(
        ref_names=trim_output(fields[0]),
        committer_date=trim_output(fields[1]),
        commit_hash=trim_output(fields[2]),
        committer_name=trim_output(fields[3]),
        subject=trim_output(subject),
    )


def parse_history(text: str) -> Iterator[HistoryToken]:
    for line in text.splitlines():
        token = parse_line(line)
        if token is not None:
            yield token
