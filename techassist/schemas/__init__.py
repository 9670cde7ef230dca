"""
Pydantic schemas for every pipeline boundary.
Each module covers one pipeline stage or cross-cutting concern.
"""

from techassist.schemas.request import (
    RAGQueryRequest,
    ConversationMessage,
    DocumentFilters,
    SearchRequest,
)
from techassist.schemas.retrieval import (
    Candidate,
    Provenance,
    VectorHit,
)
from techassist.schemas.response import (
    RAGQueryResponse,
    SourceChunk,
    TokenUsage,
    GeneratedAnswer,
    ErrorResponse,
    SearchResponse,
    SearchResult,
)
from techassist.schemas.pipeline import PipelineContext, PipelineServices

__all__ = [
    # Request
    "RAGQueryRequest",
    "ConversationMessage",
    "DocumentFilters",
    "SearchRequest",
    # Retrieval
    "Candidate",
    "Provenance",
    "VectorHit",
    # Response
    "RAGQueryResponse",
    "SourceChunk",
    "TokenUsage",
    "GeneratedAnswer",
    "ErrorResponse",
    "SearchResponse",
    "SearchResult",
    # Pipeline
    "PipelineContext",
    "PipelineServices",
]
