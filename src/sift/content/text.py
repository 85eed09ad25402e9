"""Text normalisation helpers: cleaning, keywords, chunking.

Pure functions, no I/O.  The content-processing collaborator hands the
engine raw text; these helpers produce the cleaned text that is scored,
fingerprinted, and embedded.
"""

from __future__ import annotations

import re
from collections import Counter

from sift.content.models import Keyword

STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "this", "that", "these", "those", "i", "you",
        "he", "she", "it", "we", "they", "is", "are", "was", "were", "be",
        "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "can", "must", "from",
        "into", "about", "than", "then", "there", "their", "them", "what",
        "which", "when", "where", "your", "just", "also", "some", "more",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")
_PARAGRAPH_RE = re.compile(r"\n[ \t\r\f\v]*\n\s*")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_NON_WORD_RE = re.compile(r"[^\w\s]")

# Words must be longer than this to count as keywords
_MIN_KEYWORD_LEN = 3


def clean_content(text: str) -> str:
    """Collapse whitespace, drop control characters, normalise punctuation.

    Paragraph breaks are kept as a single blank line so chunking can
    still split on them.
    """
    if not text:
        return ""
    paragraphs = (_clean_paragraph(p) for p in _PARAGRAPH_RE.split(text))
    return "\n\n".join(p for p in paragraphs if p)


def _clean_paragraph(text: str) -> str:
    text = _WHITESPACE_RE.sub(" ", text)
    text = _CONTROL_RE.sub("", text)
    text = text.replace("“", '"').replace("”", '"')
    text = text.replace("‘", "'").replace("’", "'")
    text = re.sub(r"\.{3,}", "...", text)
    text = re.sub(r"!{2,}", "!", text)
    text = re.sub(r"\?{2,}", "?", text)
    return text.strip()


def normalize_for_fingerprint(text: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    if not text:
        return ""
    normalized = _NON_WORD_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def extract_keywords(text: str, limit: int = 10) -> list[Keyword]:
    """Return the most frequent non-stopword words in *text*.

    Words are lowercased with punctuation replaced by spaces; only words
    longer than three characters are kept.  Ties keep first-seen order.

    Args:
        text: Cleaned content text.
        limit: Maximum number of keywords to return.

    Returns:
        Keywords sorted by descending frequency.
    """
    if not text:
        return []

    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    freq: Counter[str] = Counter(
        w for w in words if len(w) > _MIN_KEYWORD_LEN and w not in STOPWORDS
    )
    return [Keyword(word=word, count=count) for word, count in freq.most_common(limit)]


def chunk_content(
    text: str,
    max_chunk_size: int = 1000,
    overlap: int = 200,
) -> list[str]:
    """Split *text* into overlapping chunks, preferring paragraph breaks.

    A chunk boundary moves back to the nearest paragraph break (or,
    failing that, sentence end) as long as that keeps the chunk at least
    half of ``max_chunk_size`` long.
    """
    if not text or len(text) <= max_chunk_size:
        return [text]

    chunks: list[str] = []
    position = 0
    while position < len(text):
        end = min(position + max_chunk_size, len(text))
        if end < len(text):
            min_end = position + max_chunk_size * 0.5
            paragraph = text.rfind("\n\n", 0, end)
            sentence = text.rfind(". ", 0, end)
            if paragraph > min_end:
                end = paragraph + 2
            elif sentence > min_end:
                end = sentence + 2

        chunk = text[position:end].strip()
        if chunk:
            chunks.append(chunk)
        if end >= len(text):
            break
        position = max(end - overlap, position + 1)

    return chunks


def word_count(text: str) -> int:
    return len(text.split()) if text else 0
