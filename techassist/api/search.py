"""
Plain text search over chunk contents.

Case-insensitive substring match, no embeddings and no LLM.  Each hit is
returned with a short snippet around the first match.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techassist.db.database import get_db
from techassist.db.models import Chunk, Document
from techassist.schemas.request import SearchRequest
from techassist.schemas.response import SearchResponse, SearchResult
from techassist.utils.logging import get_logger
from techassist.utils.text import build_snippet, escape_like_pattern

logger = get_logger("techassist.api.search")

router = APIRouter(tags=["Search"])

SEARCH_RESULT_LIMIT = 10


@router.post("/search", response_model=SearchResponse)
def search_chunks(
    payload: SearchRequest,
    db: Session = Depends(get_db),
):
    """Find chunks containing the query text, earliest matches first."""
    logger.info('[SEARCH] Searching for: "%s"', payload.query)

    pattern = f"%{escape_like_pattern(payload.query)}%"
    try:
        rows = (
            db.query(Chunk.text, Chunk.equipment, Document.filename)
            .join(Document, Chunk.document_id == Document.id)
            .filter(Chunk.text.ilike(pattern, escape="\\"))
            .limit(SEARCH_RESULT_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("[SEARCH] Query failed: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    results = []
    for text, equipment, filename in rows:
        snippet, position = build_snippet(text, payload.query)
        results.append(
            SearchResult(
                file_name=filename,
                snippet=snippet,
                position=position,
                equipment=equipment,
            )
        )
    results.sort(key=lambda r: r.position)

    logger.info("[SEARCH] %d result(s)", len(results))
    return SearchResponse(success=True, results=results, count=len(results))
