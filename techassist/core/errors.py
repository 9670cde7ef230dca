"""
Error taxonomy for the query pipeline.

Fatal errors abort the request and surface their message unmodified.
Only ``DegradedSearchError`` has a local recovery path (keyword fallback).
An empty metadata-filter result is NOT an error; see
``techassist.pipeline.metadata_filter``.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures that end a query with an error response."""

    status_code: int = 500


class QueryValidationError(PipelineError):
    """Malformed or oversized request, rejected before any external call."""

    status_code = 400


class UpstreamServiceError(PipelineError):
    """Embedding or generation backend failed."""

    status_code = 502


class DataLayerError(PipelineError):
    """Vector query or metadata query failed."""

    status_code = 500


class DegradedSearchError(Exception):
    """Lexical fallback failed; the pipeline continues with semantic results."""
