"""
Lexical fallback search.

Similarity search under-weights exact terminology such as part numbers
and fault codes.  This stage picks the most discriminative question
terms, runs a case-insensitive substring search over chunk text, and
appends unseen matches with a fixed pseudo-similarity.

Failure here is recoverable: the semantic-only list is returned.
"""

from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.orm import Session

from techassist.core.config import RetrievalConfig
from techassist.core.errors import DegradedSearchError
from techassist.db.models import Chunk, Document
from techassist.schemas.retrieval import Candidate, Provenance
from techassist.utils.logging import get_logger
from techassist.utils.text import escape_like_pattern, tokenize_question

logger = get_logger("techassist.pipeline.keyword_fallback")


def extract_search_terms(question: str, config: RetrievalConfig) -> list[str]:
    """Longest non-stop-word tokens, most discriminative first."""
    tokens = tokenize_question(question, min_length=config.keyword_min_token_length)
    # sorted() is stable: equal-length tokens keep question order
    return sorted(tokens, key=len, reverse=True)[:config.keyword_term_count]


def search_keyword_matches(
    db: Session,
    terms: list[str],
    limit: int,
    *,
    allowed_document_ids: set[str] | None = None,
    equipment_type: str | None = None,
    exclude_ids: set[str] | None = None,
) -> list[tuple[Chunk, str]]:
    """
    OR-of-terms ILIKE search over chunk text, joined to documents.

    The allow-list, equipment type and excluded ids are part of the
    WHERE clause so the LIMIT only counts eligible chunks.

    Raises DegradedSearchError on any failure.
    """
    try:
        clauses = [
            Chunk.text.ilike(f"%{escape_like_pattern(term)}%", escape="\\")
            for term in terms
        ]
        query = (
            db.query(Chunk, Document.filename)
            .join(Document, Chunk.document_id == Document.id)
            .filter(or_(*clauses))
        )
        if allowed_document_ids is not None:
            query = query.filter(Chunk.document_id.in_(allowed_document_ids))
        if equipment_type:
            query = query.filter(Chunk.equipment == equipment_type)
        if exclude_ids:
            query = query.filter(~Chunk.id.in_(exclude_ids))
        return (
            query
            .order_by(Chunk.document_id, Chunk.chunk_index)
            .limit(limit)
            .all()
        )
    except Exception as e:
        raise DegradedSearchError(str(e)) from e


def enrich_with_keyword_fallback(
    db: Session,
    question: str,
    candidates: list[Candidate],
    allowed_document_ids: set[str] | None,
    equipment_type: str | None,
    config: RetrievalConfig,
) -> list[Candidate]:
    """
    Append keyword matches to the (already filtered) semantic candidates.

    Applies the same allow-list and equipment filter as the semantic
    pass, never duplicates an existing chunk id, and gives every added
    match ``config.keyword_pseudo_similarity``.
    """
    terms = extract_search_terms(question, config)
    if not terms:
        return candidates

    logger.info("[FALLBACK] Keyword search using: %s", terms)
    existing_ids = {c.id for c in candidates}
    try:
        rows = search_keyword_matches(
            db,
            terms,
            config.keyword_match_limit,
            allowed_document_ids=allowed_document_ids,
            equipment_type=equipment_type,
            exclude_ids=existing_ids,
        )
    except DegradedSearchError as e:
        logger.warning("[FALLBACK] Keyword search failed, continuing semantic-only: %s", e)
        return candidates

    merged = list(candidates)
    added = 0

    for chunk, filename in rows:
        if chunk.id in existing_ids:
            continue
        if allowed_document_ids is not None and chunk.document_id not in allowed_document_ids:
            continue
        if equipment_type and chunk.equipment != equipment_type:
            continue

        existing_ids.add(chunk.id)
        merged.append(Candidate(
            id=chunk.id,
            document_id=chunk.document_id,
            chunk_index=chunk.chunk_index,
            text=chunk.text,
            filename=filename,
            site=chunk.site,
            equipment=chunk.equipment,
            fault_code=chunk.fault_code,
            similarity=config.keyword_pseudo_similarity,
            provenance=Provenance.KEYWORD,
            retrieval_rank=added,
        ))
        added += 1

    logger.info(
        "[FALLBACK] found %d, after filter: %d new, total: %d",
        len(rows), added, len(merged),
    )
    return merged
