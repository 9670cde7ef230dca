"""
Thin API route for the RAG query endpoint.

No business logic: validates the request, calls
orchestrator.run_pipeline(), logs the query, and returns the response.
Pipeline failures are rendered by the handlers in api/errors.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from techassist.api.errors import error_response
from techassist.api.query_logging import log_query
from techassist.core.errors import PipelineError
from techassist.db.database import get_db
from techassist.pipeline.orchestrator import run_pipeline
from techassist.schemas.request import RAGQueryRequest
from techassist.schemas.response import ErrorResponse, RAGQueryResponse
from techassist.utils.logging import get_logger

logger = get_logger("techassist.api.query")

router = APIRouter(tags=["Query"])


@router.post(
    "/rag-query",
    response_model=RAGQueryResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def rag_query(
    request: RAGQueryRequest,
    db: Session = Depends(get_db),
):
    """Answer a technician's question from the ingested document corpus."""
    q = request.question[:80]
    logger.info("[RAG] New question: %s%s", q, "..." if len(request.question) > 80 else "")

    try:
        response = await run_pipeline(request, db)
    except PipelineError:
        raise
    except Exception as e:
        logger.error("[RAG] Unexpected error: %s", e, exc_info=True)
        return error_response(500, str(e))

    # Usage is only set once the generator has run; a filter miss has none
    if response.usage is not None:
        log_query(request, response)

    return response
