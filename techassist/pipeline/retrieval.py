"""
Semantic retrieval.

1. Embed the question (one call)
2. One nearest-neighbour query with a loose similarity
   floor and a high result cap
3. Hydrate hits from the chunk/document tables

Any failure here is fatal: without a baseline candidate set there is
nothing to rerank.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techassist.core.config import RetrievalConfig
from techassist.core.errors import DataLayerError, PipelineError, UpstreamServiceError
from techassist.db.models import Chunk, Document
from techassist.schemas.pipeline import PipelineServices
from techassist.schemas.retrieval import Candidate, Provenance, VectorHit
from techassist.utils.logging import get_logger

logger = get_logger("techassist.pipeline.retrieval")


async def retrieve_semantic_candidates(
    question: str,
    db: Session,
    services: PipelineServices,
    config: RetrievalConfig,
) -> list[Candidate]:
    """Embed + vector search + hydrate.  Returns candidates in vector rank order."""
    loop = asyncio.get_event_loop()

    try:
        embedding = await loop.run_in_executor(None, services.embed_query, question)
    except PipelineError:
        raise
    except Exception as e:
        raise UpstreamServiceError(str(e)) from e

    try:
        hits = await loop.run_in_executor(
            None,
            services.search_vectors,
            embedding,
            config.similarity_threshold,
            config.vector_match_count,
        )
    except PipelineError:
        raise
    except Exception as e:
        raise DataLayerError(str(e)) from e
    logger.info("[RETRIEVAL] Vector search returned %d hit(s)", len(hits))

    return hydrate_vector_hits(db, hits)


def hydrate_vector_hits(db: Session, hits: list[VectorHit]) -> list[Candidate]:
    """
    Join vector hits with their chunk rows and parent documents.

    Hits whose chunk or document no longer exists are dropped, so every
    candidate resolves to a real document.
    """
    if not hits:
        return []

    ids = [h.chunk_id for h in hits]
    try:
        rows = (
            db.query(Chunk, Document.filename)
            .join(Document, Chunk.document_id == Document.id)
            .filter(Chunk.id.in_(ids))
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("Chunk hydration failed: %s", e)
        raise DataLayerError(f"Search failed: {e}") from e

    by_id = {chunk.id: (chunk, filename) for chunk, filename in rows}

    candidates: list[Candidate] = []
    for hit in hits:
        if hit.chunk_id not in by_id:
            logger.warning("[RETRIEVAL] Orphan vector hit skipped: %s", hit.chunk_id)
            continue
        chunk, filename = by_id[hit.chunk_id]
        candidates.append(Candidate(
            id=chunk.id,
            document_id=chunk.document_id,
            chunk_index=chunk.chunk_index,
            text=chunk.text,
            filename=filename,
            site=chunk.site,
            equipment=chunk.equipment,
            fault_code=chunk.fault_code,
            similarity=hit.similarity,
            provenance=Provenance.SEMANTIC,
            retrieval_rank=len(candidates),
        ))
    return candidates


def apply_candidate_filters(
    candidates: list[Candidate],
    allowed_document_ids: set[str] | None,
    equipment_type: str | None,
) -> list[Candidate]:
    """Keep candidates inside the document allow-list and matching the equipment type."""
    filtered = candidates
    if allowed_document_ids is not None:
        filtered = [c for c in filtered if c.document_id in allowed_document_ids]
        logger.info(
            "[RETRIEVAL] Document filter: %d -> %d candidate(s)",
            len(candidates), len(filtered),
        )
    if equipment_type:
        before = len(filtered)
        filtered = [c for c in filtered if c.equipment == equipment_type]
        logger.info("[RETRIEVAL] Equipment filter: %d -> %d candidate(s)", before, len(filtered))
    return filtered
