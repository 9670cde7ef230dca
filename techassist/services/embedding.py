"""
Embedding model singleton.

The query is embedded with the same SentenceTransformer model the
ingestion subsystem used to populate the vector index.
"""

from __future__ import annotations

import threading
from typing import Any

from techassist.core.config import settings
from techassist.core.errors import UpstreamServiceError
from techassist.utils.logging import get_logger
from techassist.utils.timing import timed

logger = get_logger("techassist.services.embedding")

_model_lock = threading.Lock()
_model_instance: Any | None = None


def get_embedding_model() -> Any:
    """Return the cached SentenceTransformer model, loading it on first use."""
    global _model_instance
    if _model_instance is not None:
        return _model_instance

    with _model_lock:
        if _model_instance is None:
            from sentence_transformers import SentenceTransformer

            _model_instance = SentenceTransformer(settings.embedding_model)
            logger.info("Embedding model loaded: %s", settings.embedding_model)
        return _model_instance


@timed("embed_query")
def embed_query(text: str) -> list[float]:
    """
    Generate the embedding vector for a single query string.

    Raises UpstreamServiceError when the model cannot be loaded or fails.
    """
    try:
        model = get_embedding_model()
        # show_progress_bar=False keeps tqdm off stderr
        return model.encode(text, show_progress_bar=False).tolist()
    except Exception as e:
        logger.error("Embedding failed: %s", e)
        raise UpstreamServiceError(f"Failed to generate embedding: {e}") from e
