"""URL slugs for public form links."""

from __future__ import annotations

import re
import secrets
import string

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 6


def slugify(name: str) -> str:
    """Lower-case ``name`` and collapse every non-alphanumeric run to ``-``."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return slug.strip("-")


def generate_slug(name: str) -> str:
    """Slug of ``name`` plus a random 6-character suffix.

    A name with no usable characters gets a bare ``form-`` prefix.
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    base = slugify(name) or "form"
    return f"{base}-{suffix}"


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.match(slug))
