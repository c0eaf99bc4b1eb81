"""
Stopword set for topic keyword extraction.

Used by:
  - storyline.news.normalizer (extract_keywords)
"""
from __future__ import annotations

# Keyword extraction already drops tokens of 3 chars or fewer, so only
# longer function words and headline filler need listing here.
KEYWORD_STOP = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "from", "into", "onto", "over", "under", "about", "after", "before",
    "this", "that", "these", "those", "there", "their", "them", "they",
    "have", "been", "were", "will", "would", "could", "should", "shall",
    "what", "when", "where", "which", "while", "your", "just", "also",
    "more", "most", "than", "then", "says", "said", "here", "amid",
    "does", "being", "some", "very", "only",
})
