"""
URL canonicalization and text tokenization.

Pure functions, no state. Every comparison in the dedup and clustering
stages goes through these so two articles are always compared on the same
normalized representation.
"""

import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

from storyline.shared.stopwords import KEYWORD_STOP

_NON_WORD = re.compile(r'[^\w\s]')


def normalize_url(url: str) -> str:
    """
    Canonical form of a URL: query string and fragment removed, lower-cased.

    Tracking parameters (utm_*, ref=...) and anchors make the same story
    look like different links. Malformed URLs fall back to the lower-cased
    raw string rather than failing.
    """
    raw = url or ""
    try:
        parts = urlsplit(raw.strip())
        if not parts.scheme or not parts.netloc:
            return raw.lower()
        return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", "")).lower()
    except ValueError:
        return raw.lower()


def url_host_and_path(url: str) -> Optional[tuple]:
    """(hostname, path) of the canonical URL, or None if it has no host."""
    try:
        parts = urlsplit(normalize_url(url))
        if not parts.hostname:
            return None
        return parts.hostname, parts.path
    except ValueError:
        return None


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens longer than 2 chars, punctuation stripped."""
    if not text:
        return []
    cleaned = _NON_WORD.sub(' ', text.lower())
    return [t for t in cleaned.split() if len(t) > 2]


def extract_keywords(text: str, max_keywords: int = 10) -> List[str]:
    """
    Topic keywords: tokens longer than 3 chars that are not stop words.

    Keeps document order (headline words first) and caps at max_keywords.
    """
    keywords = [t for t in tokenize(text) if t not in KEYWORD_STOP and len(t) > 3]
    return keywords[:max_keywords]


def title_key(title: str) -> str:
    return (title or "").lower().strip()


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def text_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity over token sets. Empty text on either side scores 0."""
    if not text1 or not text2:
        return 0.0
    return jaccard(tokenize(text1), tokenize(text2))
