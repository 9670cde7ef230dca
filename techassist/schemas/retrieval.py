"""
Schemas for the retrieval stages.

A Candidate is created per request from either the vector index
(semantic) or the lexical fallback (keyword), carries its chunk
fields plus scoring state, and is never persisted.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Provenance(str, Enum):
    SEMANTIC = "semantic"
    KEYWORD = "keyword"


# Tie-break order when final scores are equal
PROVENANCE_ORDER = {
    Provenance.SEMANTIC: 0,
    Provenance.KEYWORD: 1,
}


class VectorHit(BaseModel):
    """Raw nearest-neighbour match from the vector index."""
    chunk_id: str
    similarity: float


class Candidate(BaseModel):
    """One chunk under consideration for the answer context."""
    id: str
    document_id: str
    chunk_index: int
    text: str
    filename: str | None = None
    site: str | None = None
    equipment: str | None = None
    fault_code: str | None = None

    similarity: float
    provenance: Provenance
    retrieval_rank: int = 0  # Position in the originating retriever's output

    # Set by the reranker
    final_score: float | None = None
    is_toc: bool = False
