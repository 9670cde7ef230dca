"""
PipelineContext carries state between the query pipeline stages;
PipelineServices bundles the external collaborators the pipeline calls.
"""

from __future__ import annotations

import time
from typing import Callable

from pydantic import BaseModel, Field

from techassist.schemas.request import RAGQueryRequest
from techassist.schemas.response import GeneratedAnswer
from techassist.schemas.retrieval import Candidate, VectorHit


class PipelineServices(BaseModel):
    """
    External collaborators used by one pipeline run.

    embed_query:     text -> embedding vector
    search_vectors:  (embedding, match_threshold, match_count) -> hits
    generate_answer: (system_prompt, user_prompt) -> GeneratedAnswer
    """
    embed_query: Callable[[str], list[float]]
    search_vectors: Callable[[list[float], float, int], list[VectorHit]]
    generate_answer: Callable[[str, str], GeneratedAnswer]


class PipelineContext(BaseModel):
    """
    Shared context object threaded through the pipeline stages.

    Created once per request and progressively enriched.
    """

    # ── Inputs ───────────────────────────────────────────────────────
    request: RAGQueryRequest

    # ── Stage outputs (populated progressively) ─────────────────────
    semantic_candidates: list[Candidate] = Field(default_factory=list)
    # None = unrestricted; empty set = filter miss
    allowed_document_ids: set[str] | None = None
    merged_candidates: list[Candidate] = Field(default_factory=list)
    context_candidates: list[Candidate] = Field(default_factory=list)
    generated: GeneratedAnswer | None = None

    # ── Timing ──────────────────────────────────────────────────────
    start_time: float = Field(default_factory=time.time)
    stage_timings: dict[str, float] = Field(default_factory=dict)

    class Config:
        arbitrary_types_allowed = True

    @property
    def elapsed_ms(self) -> int:
        return int((time.time() - self.start_time) * 1000)
