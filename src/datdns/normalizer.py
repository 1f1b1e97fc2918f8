"""Name normalization.

Reduces whatever the caller passed (bare hostname, URL, raw key, any of them
with a ``+<version>`` suffix) to the string used for lookups and as the
memory cache key.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from datdns.errors import InvalidNameError
from datdns.models.resolution import NormalizedName

_VERSION_SUFFIX_RE = re.compile(r"\+[^/]+$")
_DEFAULT_HASH_RE = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)


def strip_version(name: str) -> str:
    """Drop a trailing ``+<version>`` suffix: ``'example.com+12'`` → ``'example.com'``."""
    return _VERSION_SUFFIX_RE.sub("", name)


def normalize_name(raw: object, hash_re: re.Pattern[str] = _DEFAULT_HASH_RE) -> NormalizedName:
    """Normalise a caller-supplied name.

    Steps (order matters):
      1. Parse as a URL; take the hostname, else the path
      2. Strip the version suffix
      3. Detect a raw key (returned lowercased, flagged ``is_key``)
    """
    if not isinstance(raw, str):
        raise InvalidNameError(f"Name must be a string, got {type(raw).__name__}")

    try:
        parsed = urlsplit(raw.strip())
    except ValueError as exc:
        raise InvalidNameError(f"Unparseable name: {raw!r}") from exc

    name = parsed.hostname or parsed.path
    if not name:
        raise InvalidNameError(f"No hostname or path in name: {raw!r}")

    name = strip_version(name)
    if not name:
        raise InvalidNameError(f"Name is only a version suffix: {raw!r}")

    match = hash_re.match(name)
    if match:
        return NormalizedName(value=match.group(0).lower(), is_key=True)

    return NormalizedName(value=name)
