"""Query normalization shared by the catalog service and the response cache."""
from __future__ import annotations

import hashlib
import re

from unidecode import unidecode

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_query(text: str | None) -> str:
    """Fold user text to a comparable form.

    Accents and non-Latin scripts are transliterated to ASCII, case is folded
    and runs of whitespace collapse to a single space, so ``"  Café  Table"``
    and ``"cafe table"`` compare equal.
    """
    if not text:
        return ""
    folded = unidecode(text).casefold()
    return _WHITESPACE_RE.sub(" ", folded).strip()


def hash_query(text: str | None) -> str:
    # Exact text: the backend decides how loosely a query matches.
    return hashlib.sha1((text or "").encode("utf-8")).hexdigest()
