"""Version parsing and ordering.

Versions are compared as dotted numeric tuples, which is what the deployed
services report (`1.4.2`, `v2.0`, `v.0.0.588` from some infra repos). This is
not full semantic versioning: `1.2` equals `1.2.0`, and a pre-release suffix
such as `1.0.0-beta` keeps only its leading digits, so it compares equal to
`1.0.0`.
"""
import re
from typing import Optional, Tuple

_PREFIX_RE = re.compile(r"^[vV]\.?(?=\d|$)")
_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


def normalize_version(version: Optional[str]) -> str:
    """Strip whitespace and the optional `v` / `v.` prefix.

    `v.0.0.588` -> `0.0.588`, `V1.2` -> `1.2`.
    """
    if not version:
        return ""
    v = str(version).strip()
    return _PREFIX_RE.sub("", v, count=1)


def _segment_value(segment: str) -> int:
    m = _LEADING_DIGITS_RE.match(segment)
    return int(m.group(1)) if m else 0


def parse_version(version: Optional[str]) -> Tuple[int, ...]:
    """Parse a version string into a tuple of non-negative integers.

    Segments without leading digits count as 0; this never raises.
    """
    return tuple(_segment_value(s) for s in normalize_version(version).split("."))


def compare_versions(a: Optional[str], b: Optional[str]) -> int:
    """Return 1 if `a` is newer than `b`, -1 if older, 0 if they compare equal."""
    va = parse_version(a)
    vb = parse_version(b)

    for i in range(max(len(va), len(vb))):
        na = va[i] if i < len(va) else 0
        nb = vb[i] if i < len(vb) else 0
        if na > nb:
            return 1
        if na < nb:
            return -1
    return 0
