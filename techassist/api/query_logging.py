"""
Query logging for the RAG endpoint.

Writes one QueryLog row per answered question.  Uses its own DB
session (SessionLocal) and never raises: a logging failure must not
turn a good answer into an error.
"""

from __future__ import annotations

import json

from techassist.db.database import get_db_context
from techassist.db.models import QueryLog
from techassist.schemas.request import RAGQueryRequest
from techassist.schemas.response import RAGQueryResponse
from techassist.utils.logging import get_logger

logger = get_logger("techassist.api.query_logging")

MAX_ANSWER_LENGTH = 1_000_000  # 1MB for answer


def build_query_log(request: RAGQueryRequest, response: RAGQueryResponse) -> QueryLog:
    """Map a request/response pair onto a QueryLog row."""
    usage = response.usage
    answer = response.answer[:MAX_ANSWER_LENGTH]
    if len(response.answer) > MAX_ANSWER_LENGTH:
        answer = answer + "...[truncated]"

    return QueryLog(
        query_text=request.question,
        retrieved_chunk_ids=json.dumps([f"{s.document_id}:{s.chunk_index}" for s in response.sources]),
        retrieved_similarities=json.dumps([round(s.similarity, 4) for s in response.sources]),
        response_text=answer,
        input_tokens=usage.input_tokens if usage else None,
        output_tokens=usage.output_tokens if usage else None,
        total_tokens=usage.total_tokens if usage else None,
        execution_time_ms=response.execution_time_ms,
        top_k=len(response.sources),
        is_conversation_mode=request.is_conversation_mode,
    )


def log_query(request: RAGQueryRequest, response: RAGQueryResponse) -> None:
    """Persist the query; failures are logged and swallowed."""
    try:
        with get_db_context() as db:
            log = build_query_log(request, response)
            db.add(log)
            db.flush()
            logger.info(
                "[LOG] Query logged | id=%s | time=%sms | sources=%d",
                log.id, response.execution_time_ms, len(response.sources),
            )
    except Exception as e:
        logger.warning("Query logging failed (response still returned): %s", e)
