"""
Pipeline orchestrator: top-level entry point for a RAG query.

Stages run strictly in order, each consuming the previous output:

  1. Embed + vector search         (fatal on failure)
  2. Resolve metadata filters      (fatal on failure; empty → short-circuit)
  3. Filter semantic candidates
  4. Keyword fallback              (recoverable)
  5. Rerank + truncate to cap
  6. Assemble prompt
  7. Generate answer               (fatal on failure)
  8. Package response
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy.orm import Session

from techassist.core.config import RetrievalConfig, settings
from techassist.core.errors import PipelineError, QueryValidationError, UpstreamServiceError
from techassist.schemas.pipeline import PipelineContext, PipelineServices
from techassist.schemas.request import RAGQueryRequest
from techassist.schemas.response import RAGQueryResponse, SourceChunk
from techassist.utils.logging import get_logger
from techassist.utils.timing import Timer

logger = get_logger("techassist.pipeline.orchestrator")


def default_services() -> PipelineServices:
    """The production adapters: sentence-transformers, ChromaDB, OpenAI."""
    from techassist.services.embedding import embed_query
    from techassist.services.llm import generate_answer
    from techassist.services.vector_store import query_similar_chunks

    return PipelineServices(
        embed_query=embed_query,
        search_vectors=query_similar_chunks,
        generate_answer=generate_answer,
    )


def format_validation_errors(errors: list[Any]) -> str:
    """Collapse pydantic error dicts into one readable message."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def validate_request(payload: Mapping[str, Any]) -> RAGQueryRequest:
    """
    Validate an untyped request body for programmatic callers (scripts,
    workers, other services) that do not go through the HTTP route.

    The ``/rag-query`` route gets the same RAGQueryRequest validation from
    FastAPI body parsing; both paths report failures with
    format_validation_errors().

    Raises QueryValidationError before any external call is made.
    """
    if not isinstance(payload, Mapping):
        raise QueryValidationError("Request body must be an object")
    try:
        return RAGQueryRequest.model_validate(payload)
    except ValidationError as e:
        raise QueryValidationError(format_validation_errors(e.errors())) from e


async def run_pipeline(
    request: RAGQueryRequest,
    db: Session,
    *,
    services: PipelineServices | None = None,
    config: RetrievalConfig | None = None,
) -> RAGQueryResponse:
    """
    Execute the full query pipeline for one validated request.

    Returns either a grounded answer with ranked sources or the
    filter-miss message with no sources.  Raises PipelineError
    subclasses for fatal failures.
    """
    from techassist.pipeline.context_builder import build_prompts
    from techassist.pipeline.keyword_fallback import enrich_with_keyword_fallback
    from techassist.pipeline.metadata_filter import FILTER_MISS_MESSAGE, resolve_document_filter
    from techassist.pipeline.reranker import rerank_candidates, truncate_to_cap
    from techassist.pipeline.retrieval import apply_candidate_filters, retrieve_semantic_candidates

    services = services or default_services()
    config = config or settings.retrieval
    ctx = PipelineContext(request=request)

    logger.info(
        "[PIPELINE] Started | question: %s | filters=%s equipment=%s | voice=%s | history=%d",
        request.question[:80],
        request.filters.model_dump(exclude_none=True),
        request.equipment_type,
        request.is_conversation_mode,
        len(request.history or []),
    )

    # ── 1. Semantic retrieval ───────────────────────────────────────
    with Timer("semantic_retrieval", ctx.stage_timings):
        ctx.semantic_candidates = await retrieve_semantic_candidates(
            request.question, db, services, config,
        )

    # ── 2. Metadata filter (resolved once, reused for fallback) ─────
    ctx.allowed_document_ids = resolve_document_filter(db, request.filters)
    if ctx.allowed_document_ids is not None and not ctx.allowed_document_ids:
        logger.info("[PIPELINE] Short-circuit: no documents match filters")
        return RAGQueryResponse(answer=FILTER_MISS_MESSAGE, sources=[])

    # ── 3. Filter semantic hits ─────────────────────────────────────
    filtered = apply_candidate_filters(
        ctx.semantic_candidates, ctx.allowed_document_ids, request.equipment_type,
    )

    # ── 4. Keyword fallback ─────────────────────────────────────────
    with Timer("keyword_fallback", ctx.stage_timings):
        ctx.merged_candidates = enrich_with_keyword_fallback(
            db,
            request.question,
            filtered,
            ctx.allowed_document_ids,
            request.equipment_type,
            config,
        )

    # ── 5. Rerank + truncate ────────────────────────────────────────
    ranked = rerank_candidates(ctx.merged_candidates, request.question, config)
    ctx.context_candidates = truncate_to_cap(ranked, config.context_chunk_cap)
    for c in ctx.context_candidates[:5]:
        logger.debug(
            "[PIPELINE] top chunk %s | score=%.3f toc=%s | %s",
            c.chunk_index, c.final_score or 0.0, c.is_toc, c.text[:80],
        )

    # ── 6. Prompt ───────────────────────────────────────────────────
    system_prompt, user_prompt = build_prompts(
        request.question,
        ctx.context_candidates,
        request.history,
        request.is_conversation_mode,
        config.history_window,
    )

    # ── 7. Generate ─────────────────────────────────────────────────
    with Timer("generation", ctx.stage_timings):
        ctx.generated = await _generate(services, system_prompt, user_prompt)

    logger.info(
        "[PIPELINE] Done in %dms | semantic=%d merged=%d context=%d | stages=%s",
        ctx.elapsed_ms,
        len(ctx.semantic_candidates),
        len(ctx.merged_candidates),
        len(ctx.context_candidates),
        {k: round(v * 1000) for k, v in ctx.stage_timings.items()},
    )

    # ── 8. Package ──────────────────────────────────────────────────
    return RAGQueryResponse(
        answer=ctx.generated.content,
        sources=[
            SourceChunk(
                filename=c.filename or "Unknown",
                chunk_index=c.chunk_index,
                text=c.text,
                similarity=c.similarity,
                document_id=c.document_id,
            )
            for c in ctx.context_candidates
        ],
        usage=ctx.generated.usage,
        execution_time_ms=ctx.elapsed_ms,
    )


async def _generate(services: PipelineServices, system_prompt: str, user_prompt: str):
    """Run the blocking generation call off the event loop."""
    loop = asyncio.get_event_loop()
    try:
        return await loop.run_in_executor(
            None, services.generate_answer, system_prompt, user_prompt,
        )
    except PipelineError:
        raise
    except Exception as e:
        raise UpstreamServiceError(str(e)) from e
