"""
Response schemas for the query and search APIs.

Wire names follow the public contract (``chunkIndex``, ``fileName`` ...);
Python code constructs them with snake_case names.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    """Token accounting reported by the generation backend."""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class GeneratedAnswer(BaseModel):
    """Completion text returned verbatim by the AnswerGenerator."""
    content: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


class SourceChunk(BaseModel):
    filename: str
    chunk_index: int = Field(..., alias="chunkIndex")
    text: str
    similarity: float
    document_id: str | None = Field(default=None, alias="documentId")

    class Config:
        populate_by_name = True


class RAGQueryResponse(BaseModel):
    """
    Successful query result: either a grounded answer with ranked
    sources, or the filter-miss message with no sources.
    """
    success: bool = True
    answer: str
    sources: list[SourceChunk] = Field(default_factory=list)
    usage: TokenUsage | None = None
    execution_time_ms: int | None = Field(default=None, alias="executionTimeMs")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    error: str


class SearchResult(BaseModel):
    file_name: str = Field(..., alias="fileName")
    snippet: str
    position: int
    equipment: str | None = None

    class Config:
        populate_by_name = True


class SearchResponse(BaseModel):
    success: bool = True
    results: list[SearchResult] = Field(default_factory=list)
    count: int = 0
