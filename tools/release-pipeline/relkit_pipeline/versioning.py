from __future__ import annotations

import re

_TAG_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")

BUMPS = ("major", "minor", "patch")


def next_release_tag(latest_tag: str, bump: str = "patch") -> str:
    """Return the ``vX.Y.Z`` tag following ``latest_tag`` (counting from ``v0.0.0`` when empty).

    ``bump`` selects the component to increment; lower components reset to zero.
    """

    kind = bump.lower()
    if kind not in BUMPS:
        raise ValueError(f"Unknown bump type '{bump}'. Expected {'|'.join(BUMPS)}.")

    parts = [0, 0, 0]
    if latest_tag:
        match = _TAG_RE.match(latest_tag.strip())
        if match is None:
            raise ValueError(f"Latest tag '{latest_tag}' is not a vX.Y.Z release tag.")
        parts = [int(group) for group in match.groups()]

    position = BUMPS.index(kind)
    parts[position] += 1
    parts[position + 1:] = [0] * (len(parts) - position - 1)
    return "v{}.{}.{}".format(*parts)
