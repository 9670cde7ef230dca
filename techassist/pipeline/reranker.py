"""
Candidate scoring, table-of-contents detection, and ranking.

With a loose vector floor a naive top-K is dominated by
index / table-of-contents pages that sit close to many queries but
never answer them.  Scoring per candidate:

  1. base = similarity (semantic) or pseudo-similarity (keyword)
  2. TOC-like text → base × toc_penalty
  3. + procedural_bonus per procedural indicator present
  4. + keyword_bonus per question keyword present (non-TOC only)
  5. + quantitative_bonus if a number+unit appears

Ordering: final score desc, then semantic before keyword, then original
retrieval order.

All functions here are pure (no I/O, no DB, no LLM).
"""

from __future__ import annotations

import re

from techassist.core.config import RetrievalConfig
from techassist.schemas.retrieval import Candidate, PROVENANCE_ORDER
from techassist.utils.logging import get_logger
from techassist.utils.text import extract_question_keywords

logger = get_logger("techassist.pipeline.reranker")


# Maintenance verbs, safety terms, measurement nouns
PROCEDURAL_INDICATORS = (
    "replace", "every", "years", "check", "inspect", "clean", "ensure",
    "tighten", "disconnect",
    "warning", "caution", "danger", "must", "should", "procedure", "step",
    "value", "concentration", "level", "temperature", "pressure",
)

_DOT_RUN = re.compile(r"\.{4,}")
_PAGE_REFERENCE = re.compile(r"\.{3,}\s*\d{1,3}\s")
_NUMERIC_WORD = re.compile(r"^[\d.]+$")
_QUANTITY = re.compile(
    r"\d+(?:[.,]\d+)?\s*"
    r"(?:%|°\s?[CF]\b|(?:ppm|nm|ft-?lbs?|psi|bar|kpa|mpa|v|volts?|kv|amps?|ma|kw|kwh|hz|rpm"
    r"|mm|cm|kg|lbs?|years?|months?|weeks?|days?|hours?|hrs?|minutes?|mins?|seconds?|secs?)\b)",
    re.IGNORECASE,
)


def is_toc_chunk(text: str, config: RetrievalConfig | None = None) -> bool:
    """
    Detect table-of-contents-like text.

    Two independent signals:
      (a) several runs of 4+ leader dots with little real word content
      (b) repeated "..... 42" page references
    """
    config = config or RetrievalConfig()
    if not text:
        return False

    dot_runs = len(_DOT_RUN.findall(text))
    words = [w for w in text.split() if len(w) > 2 and not _NUMERIC_WORD.match(w)]
    content_ratio = len(words) / (len(text) / 10)  # words per 10 chars
    if dot_runs >= config.toc_min_dot_runs and content_ratio < config.toc_max_content_ratio:
        return True

    return len(_PAGE_REFERENCE.findall(text)) >= config.toc_min_page_refs


def has_quantitative_value(text: str) -> bool:
    """True when a number is immediately followed by a unit (45 Nm, 80%, 3 months)."""
    return bool(_QUANTITY.search(text or ""))


def score_text(
    text: str,
    base: float,
    keywords: list[str],
    is_toc: bool,
    config: RetrievalConfig,
) -> float:
    """Apply the TOC penalty and content bonuses to a base score."""
    lowered = text.lower()
    score = base

    if is_toc:
        score *= config.toc_penalty

    procedural = sum(1 for term in PROCEDURAL_INDICATORS if term in lowered)
    score += procedural * config.procedural_bonus

    if not is_toc:
        matched = sum(1 for kw in keywords if kw in lowered)
        score += matched * config.keyword_bonus

    if has_quantitative_value(text):
        score += config.quantitative_bonus

    return score


def rank_key(candidate: Candidate) -> tuple[float, int, int]:
    """Sort key: score desc, semantic before keyword, then retrieval order."""
    return (
        -(candidate.final_score or 0.0),
        PROVENANCE_ORDER[candidate.provenance],
        candidate.retrieval_rank,
    )


def rerank_candidates(
    candidates: list[Candidate],
    question: str,
    config: RetrievalConfig | None = None,
) -> list[Candidate]:
    """
    Score every candidate and return a new, sorted list.

    Deterministic: the same candidates and question always produce the
    same order.  Input candidates are not mutated.
    """
    config = config or RetrievalConfig()
    keywords = extract_question_keywords(question)

    scored: list[Candidate] = []
    for c in candidates:
        toc = is_toc_chunk(c.text, config)
        score = score_text(c.text, c.similarity, keywords, toc, config)
        scored.append(c.model_copy(update={"final_score": score, "is_toc": toc}))

    ranked = sorted(scored, key=rank_key)
    toc_count = sum(1 for c in ranked if c.is_toc)
    logger.info(
        "Reranked %d candidate(s) (%d TOC-like, keywords=%s)",
        len(ranked), toc_count, keywords,
    )
    return ranked


def truncate_to_cap(candidates: list[Candidate], cap: int) -> list[Candidate]:
    """Keep the top ``cap`` candidates for the answer context."""
    if len(candidates) > cap:
        logger.info("Pruned candidates: %d -> %d", len(candidates), cap)
        return candidates[:cap]
    return candidates
