"""
Text utilities shared by retrieval, reranking and search:
  - Stop-word list and question tokenization
  - LIKE-pattern escaping
  - Snippet extraction around a match

All functions are pure (no I/O, no DB, no LLM).
"""

from __future__ import annotations

import re


# ── Stop words (dropped before lexical matching) ────────────────────
STOP_WORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "from", "have", "what",
    "when", "where", "which", "will", "would", "could", "should", "about",
    "your", "into", "over", "under", "after", "before", "while", "there",
    "here", "such", "than", "then", "tell", "know",
})

_ALNUM_TOKEN = re.compile(r"[a-z0-9]+")
_ALPHA_TOKEN = re.compile(r"[a-z]{4,}")
_LIKE_SPECIALS = re.compile(r"[%_\\]")


def dedupe(items: list[str]) -> list[str]:
    """Drop repeated items, keeping the first occurrence's position."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def tokenize_question(question: str, min_length: int = 4) -> list[str]:
    """
    Lowercase alphanumeric tokens of at least ``min_length`` chars,
    with stop words removed.  Order of first appearance is kept.
    """
    tokens = _ALNUM_TOKEN.findall((question or "").lower())
    return dedupe([
        t for t in tokens
        if len(t) >= min_length and t not in STOP_WORDS
    ])


def extract_question_keywords(question: str) -> list[str]:
    """Alphabetic question words (4+ letters, non-stop-word) used for rerank boosts."""
    words = _ALPHA_TOKEN.findall((question or "").lower())
    return dedupe([w for w in words if w not in STOP_WORDS])


def escape_like_pattern(term: str) -> str:
    """Escape ``%``, ``_`` and ``\\`` so a term matches literally inside LIKE."""
    return _LIKE_SPECIALS.sub(lambda m: "\\" + m.group(0), term)


def build_snippet(text: str, query: str, radius: int = 100, slack: int = 20) -> tuple[str, int]:
    """
    Cut a snippet of ``text`` around the first case-insensitive match of
    ``query``, snapped to nearby word boundaries.

    Returns ``(snippet, match_position)``; position is -1 when there is
    no match, in which case the snippet starts at the beginning of the text.
    """
    position = text.lower().find(query.lower())
    anchor = max(position, 0)

    start = max(0, anchor - radius)
    end = min(len(text), anchor + len(query) + radius)

    if start > 0:
        space = text.rfind(" ", 0, start + 1)
        if space > start - slack:
            start = space + 1
    if end < len(text):
        space = text.find(" ", end)
        if 0 < space < end + slack:
            end = space

    snippet = text[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet, position
