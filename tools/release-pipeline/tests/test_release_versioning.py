from __future__ import annotations

import pytest

from relkit_pipeline.versioning import next_release_tag


@pytest.mark.parametrize(
    ("latest", "bump", "expected"),
    [
        ("v1.2.3", "patch", "v1.2.4"),
        ("v1.2.3", "minor", "v1.3.0"),
        ("v1.2.3", "major", "v2.0.0"),
        ("1.9.9", "MINOR", "v1.10.0"),
        (" v0.4.1\n", "patch", "v0.4.2"),
    ],
)
def test_next_release_tag(latest: str, bump: str, expected: str) -> None:
    assert next_release_tag(latest, bump) == expected


def test_next_release_tag_counts_from_zero_without_tags() -> None:
    assert next_release_tag("") == "v0.0.1"
    assert next_release_tag("", "minor") == "v0.1.0"
    assert next_release_tag("", "major") == "v1.0.0"


def test_next_release_tag_rejects_unknown_bump() -> None:
    with pytest.raises(ValueError, match="Unknown bump type 'hotfix'"):
        next_release_tag("v1.2.3", "hotfix")
    with pytest.raises(ValueError, match="Unknown bump type"):
        next_release_tag("", "hotfix")


@pytest.mark.parametrize("latest", ["v1.2.3-rc1", "v1.2", "release-7"])
def test_next_release_tag_rejects_non_release_tags(latest: str) -> None:
    with pytest.raises(ValueError, match="not a vX.Y.Z"):
        next_release_tag(latest)
