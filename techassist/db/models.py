import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from techassist.db.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Document(Base):
    """Ingested source document.  Populated by ingestion; read-only here."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    filename = Column(String, nullable=False)
    doc_type = Column(String, nullable=True, index=True)
    site = Column(String, nullable=True, index=True)
    equipment_make = Column(String, nullable=True, index=True)
    equipment_model = Column(String, nullable=True, index=True)
    upload_date = Column(Date, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    chunks = relationship("Chunk", back_populates="document", cascade="all, delete-orphan")


class Chunk(Base):
    """
    One retrievable fragment of a Document.

    The embedding lives in the ChromaDB collection under the same id.
    """

    __tablename__ = "chunks"

    id = Column(String(36), primary_key=True, default=_new_id)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    chunk_index = Column(Integer, nullable=False)  # Ordinal within the document
    text = Column(Text, nullable=False)
    site = Column(String, nullable=True)
    equipment = Column(String, nullable=True)  # Equipment type (chunk-level filter)
    fault_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    document = relationship("Document", back_populates="chunks")


class QueryLog(Base):
    __tablename__ = "query_logs"

    id = Column(Integer, primary_key=True, index=True)
    query_text = Column(Text, nullable=False)
    retrieved_chunk_ids = Column(Text, nullable=True)  # JSON list, final rank order
    retrieved_similarities = Column(Text, nullable=True)  # JSON list, aligned with ids
    response_text = Column(Text, nullable=True)
    input_tokens = Column(Integer, nullable=True)
    output_tokens = Column(Integer, nullable=True)
    total_tokens = Column(Integer, nullable=True)
    execution_time_ms = Column(Integer, nullable=True)
    top_k = Column(Integer, nullable=True)  # Number of context blocks sent to the model
    is_conversation_mode = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
