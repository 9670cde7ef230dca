from pydantic import BaseModel
from pydantic_settings import BaseSettings
import multiprocessing


class RetrievalConfig(BaseModel):
    """
    Tuning constants for retrieval and reranking.

    Override from the environment with the nested delimiter, e.g.
    ``RETRIEVAL__SIMILARITY_THRESHOLD=0.2``.
    """

    # ── Vector search ────────────────────────────────────────────────
    similarity_threshold: float = 0.15
    vector_match_count: int = 50

    # ── Keyword fallback ─────────────────────────────────────────────
    keyword_min_token_length: int = 4
    keyword_term_count: int = 4  # Longest N tokens become search terms
    keyword_match_limit: int = 50
    # Fixed stand-in similarity for lexical hits; must stay below confident semantic matches
    keyword_pseudo_similarity: float = 0.4

    # ── Reranking ────────────────────────────────────────────────────
    toc_penalty: float = 0.3  # Multiplier applied to table-of-contents chunks
    toc_min_dot_runs: int = 3  # Runs of 4+ dots needed for the density heuristic
    toc_max_content_ratio: float = 2.0  # Words per 10 chars below which dotted text is TOC
    toc_min_page_refs: int = 2  # "..... 42" style page references
    procedural_bonus: float = 0.05  # Per procedural indicator present
    keyword_bonus: float = 0.1  # Per question keyword present (non-TOC only)
    quantitative_bonus: float = 0.15  # Flat, when a number+unit appears

    # ── Context assembly ─────────────────────────────────────────────
    context_chunk_cap: int = 30
    history_window: int = 8


class Settings(BaseSettings):
    app_name: str = "TechAssist RAG Backend"
    environment: str = "development"
    log_level: str | None = None  # DEBUG, INFO, WARNING...; defaults by environment
    host: str = "127.0.0.1"
    port: int = 8000
    # SQLite database URL, default stored next to the working directory
    database_url: str = "sqlite:///./techassist.db"
    # DB connection pool settings
    pool_size: int = max(5, multiprocessing.cpu_count())  # Scale with CPU cores
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 3600  # Recycle connections after 1 hour
    pool_timeout: int = 30  # Timeout for getting connection from pool
    # SQLite-specific settings
    sqlite_timeout: int = 20  # SQLite connection timeout in seconds
    sqlite_check_same_thread: bool = False  # Allow connections from different threads
    # ChromaDB settings
    chromadb_persist_directory: str | None = None  # Auto-detected if None
    chromadb_collection: str = "chunks"
    # Embedding model (must match the model used at ingestion time)
    embedding_model: str = "all-MiniLM-L6-v2"
    # OpenAI-compatible generation backend
    openai_api_key: str | None = None
    openai_base_url: str | None = None  # Set to route through a gateway
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.3
    # Tokenizers parallelism setting (for huggingface tokenizers)
    tokenizers_parallelism: str | None = None

    retrieval: RetrievalConfig = RetrievalConfig()

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra environment variables that aren't in the Settings class


settings = Settings()
