"""
Shared constants used across layers.

- stopwords.py: Stopword set for topic keyword extraction
"""
