"""
Metadata filter resolution.

Turns the optional document-level filters of a request into the set of
document ids retrieval is allowed to draw from.  Answers directly from
the document table: NO embedding, NO vector search.

Outcomes:
  - None       → no filter supplied, retrieval is unrestricted
  - empty set  → filters supplied but nothing matches; the pipeline
                 short-circuits with FILTER_MISS_MESSAGE (not an error)
  - non-empty  → allow-list applied to semantic AND keyword candidates
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techassist.core.errors import DataLayerError
from techassist.db.models import Document
from techassist.schemas.request import DocumentFilters
from techassist.utils.logging import get_logger

logger = get_logger("techassist.pipeline.metadata_filter")

FILTER_MISS_MESSAGE = (
    "No documents match the selected filters. "
    "Try broadening your filters or searching all documents."
)


def resolve_document_filter(
    db: Session,
    filters: DocumentFilters,
) -> set[str] | None:
    """
    Resolve filters to an allow-list of document ids (AND of all fields).

    Raises DataLayerError if the document query fails.
    """
    if filters.is_empty:
        return None

    query = db.query(Document.id)
    if filters.doc_type is not None:
        query = query.filter(Document.doc_type == filters.doc_type)
    if filters.upload_date is not None:
        query = query.filter(Document.upload_date == filters.upload_date)
    if filters.site is not None:
        query = query.filter(Document.site == filters.site)
    if filters.equipment_make is not None:
        query = query.filter(Document.equipment_make == filters.equipment_make)
    if filters.equipment_model is not None:
        query = query.filter(Document.equipment_model == filters.equipment_model)

    try:
        matching = {row.id for row in query.all()}
    except SQLAlchemyError as e:
        logger.error("Filter query failed: %s", e)
        raise DataLayerError(f"Filter query failed: {e}") from e

    logger.info(
        "[FILTER] %d document(s) match %s",
        len(matching), filters.model_dump(exclude_none=True),
    )
    return matching
