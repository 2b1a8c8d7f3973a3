"""Page name normalization and storage key layout."""

import re

from landinger.constants.storage import (
    HTML_SUFFIX,
    METADATA_PREFIX,
    METADATA_SUFFIX,
    PAGES_PREFIX,
)

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def normalize_page_name(raw_name: str) -> str:
    """Map a free-form page name to its canonical storage key.

    Every character outside ``[a-zA-Z0-9_-]`` becomes ``_`` and the result is
    lowercased, so the key is safe in URLs and file names. The mapping is
    deterministic and idempotent and never fails: ``""`` maps to ``""`` and a
    name with no valid characters maps to underscores.

    Examples:
        >>> normalize_page_name("My Page!")
        'my_page_'
        >>> normalize_page_name("Café")
        'caf_'
    """
    # Replace before lowercasing: some non-ASCII letters lowercase to ASCII.
    return _INVALID_CHARS.sub("_", raw_name).lower()


def page_key(canonical_key: str) -> str:
    """Storage key of a page's HTML body."""
    return f"{PAGES_PREFIX}{canonical_key}{HTML_SUFFIX}"


def metadata_key(canonical_key: str) -> str:
    """Storage key of a page's metadata sidecar."""
    return f"{METADATA_PREFIX}{canonical_key}{METADATA_SUFFIX}"


def canonical_key_from_storage_key(key: str) -> str | None:
    """Recover the canonical key from a page or metadata storage key.

    Returns:
        The canonical key, or None if key is not a page or metadata key.
    """
    for prefix, suffix in ((PAGES_PREFIX, HTML_SUFFIX), (METADATA_PREFIX, METADATA_SUFFIX)):
        if key.startswith(prefix) and key.endswith(suffix):
            return key[len(prefix) : -len(suffix)]
    return None
