"""
Formatting helpers for derived fields (usernames, slugs, hashes).
"""

import hashlib
import json
import re
import unicodedata
from typing import Any, Dict, Optional


def generate_username_from_email(email: str) -> str:
    """
    Derive a username from the local part of an email address.

    Every character that is not an ASCII letter or digit becomes ``_``.

    Example:
        >>> generate_username_from_email("john.doe+shop@example.com")
        'john_doe_shop'
    """
    prefix = email.split("@", 1)[0]
    return "".join(c if c.isascii() and c.isalnum() else "_" for c in prefix)


def slugify(value: str) -> str:
    """
    Build a URL slug from a product name.

    Accents are stripped, the text is lowercased and runs of anything
    other than letters and digits collapse into a single hyphen.
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "item"


def attributes_hash(attributes: Optional[Dict[str, Any]]) -> str:
    """Stable sha256 of an attributes mapping (canonical JSON)."""
    canonical = json.dumps(attributes or {}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def format_cents(cents: int, currency: str = "BRL") -> str:
    """Render integer cents as a human readable amount, e.g. ``BRL 12.50``."""
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{currency} {sign}{cents // 100}.{cents % 100:02d}"
