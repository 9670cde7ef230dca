import chromadb
from pathlib import Path
import threading

from techassist.core.config import settings
from techassist.core.errors import DataLayerError
from techassist.schemas.retrieval import VectorHit
from techassist.utils.logging import get_logger

logger = get_logger("techassist.services.vector_store")

# Thread-local storage for ChromaDB clients (one per thread)
_thread_local = threading.local()
_chroma_client_lock = threading.Lock()


def _get_persist_directory(persist_directory: str | None = None) -> str:
    """
    Resolve the directory where ChromaDB data is stored.
    Defaults to ./vector_db/chroma_db next to the package.
    """
    if persist_directory is not None:
        return persist_directory

    if settings.chromadb_persist_directory:
        return settings.chromadb_persist_directory

    base_dir = Path(__file__).resolve().parents[2]
    return str(base_dir / "vector_db" / "chroma_db")


def _get_chroma_client(persist_directory: str | None = None) -> chromadb.ClientAPI:
    """
    Get a ChromaDB client for the current thread.

    ChromaDB (via SQLite) is sensitive to sharing connections across
    threads, so each executor thread gets its own client.
    """
    path = _get_persist_directory(persist_directory)

    if getattr(_thread_local, "persist_path", None) != path:
        with _chroma_client_lock:
            _thread_local.chroma_client = chromadb.PersistentClient(
                path=path,
                settings=chromadb.Settings(
                    anonymized_telemetry=False,
                ),
            )
            _thread_local.persist_path = path

    return _thread_local.chroma_client


def get_chunk_collection(persist_directory: str | None = None) -> chromadb.Collection:
    """Return the chunk embedding collection (cosine space), creating it if missing."""
    client = _get_chroma_client(persist_directory)
    return client.get_or_create_collection(
        name=settings.chromadb_collection,
        metadata={"hnsw:space": "cosine"},
    )


def init_chromadb(persist_directory: str | None = None) -> bool:
    """
    Initialize ChromaDB connection and verify it works.
    Call this during app startup.
    """
    try:
        collection = get_chunk_collection(persist_directory)
        logger.info(
            "[OK] ChromaDB ready (collection=%s, vectors=%d)",
            collection.name, collection.count(),
        )
        return True
    except Exception as e:
        logger.error("[FAIL] ChromaDB connection failed: %s", e)
        return False


def query_similar_chunks(
    query_embedding: list[float],
    match_threshold: float,
    match_count: int,
    persist_directory: str | None = None,
) -> list[VectorHit]:
    """
    Nearest-neighbour search over chunk embeddings.

    Similarity is ``1 - cosine distance`` clamped to [0, 1]; only hits
    strictly above ``match_threshold`` are returned, best first, at most
    ``match_count`` of them.

    Raises DataLayerError on any index failure.
    """
    try:
        collection = get_chunk_collection(persist_directory)
        results = collection.query(
            query_embeddings=[query_embedding],
            n_results=match_count,
            include=["distances"],
        )
    except Exception as e:
        logger.error("Vector search failed: %s", e)
        raise DataLayerError(f"Vector search failed: {e}") from e

    if not results.get("ids") or not results["ids"][0]:
        return []

    hits: list[VectorHit] = []
    distances = results["distances"][0] if results.get("distances") else []
    for idx, chunk_id in enumerate(results["ids"][0]):
        distance = float(distances[idx]) if idx < len(distances) else 1.0
        similarity = min(1.0, max(0.0, 1.0 - distance))
        if similarity > match_threshold:
            hits.append(VectorHit(chunk_id=chunk_id, similarity=similarity))
    return hits
