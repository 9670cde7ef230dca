"""
Shared fixtures: an in-memory SQLite database seeded with documents and
chunks, plus fake embedding / vector / generation services.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from techassist.db.database import build_engine, init_db
from techassist.db.models import Chunk, Document
from techassist.schemas.pipeline import PipelineServices
from techassist.schemas.response import GeneratedAnswer, TokenUsage
from techassist.schemas.retrieval import Candidate, Provenance, VectorHit


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    assert init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


def add_document(db, doc_id, filename, **fields):
    doc = Document(id=doc_id, filename=filename, **fields)
    db.add(doc)
    db.commit()
    return doc


def add_chunk(db, chunk_id, document_id, chunk_index, text, **fields):
    chunk = Chunk(
        id=chunk_id,
        document_id=document_id,
        chunk_index=chunk_index,
        text=text,
        **fields,
    )
    db.add(chunk)
    db.commit()
    return chunk


@pytest.fixture
def seeded_db(db_session):
    """
    Two inverter manuals and one battery manual.

    Chunk texts are chosen so TOC detection, quantitative bonuses and the
    F312 fault-code lookup can all be exercised.
    """
    add_document(
        db_session, "doc-inv-a", "inverter_a_manual.pdf",
        doc_type="manual", site="north", equipment_make="Voltra",
        equipment_model="VX-200", upload_date=date(2024, 3, 1),
    )
    add_document(
        db_session, "doc-inv-b", "inverter_b_service.pdf",
        doc_type="service", site="south", equipment_make="Voltra",
        equipment_model="VX-300", upload_date=date(2024, 5, 12),
    )
    add_document(
        db_session, "doc-bat", "battery_rack_guide.pdf",
        doc_type="manual", site="north", equipment_make="Cellmax",
        equipment_model="CR-10", upload_date=date(2023, 11, 20),
    )

    add_chunk(
        db_session, "c-toc", "doc-inv-a", 0,
        "Contents\nIntroduction ........ 1\nSafety ........ 4\nMaintenance ........ 12\n"
        "Troubleshooting ........ 30\n",
        equipment="inverter",
    )
    add_chunk(
        db_session, "c-torque", "doc-inv-a", 5,
        "Tighten the terminal bolts to 45 Nm using a calibrated torque wrench.",
        equipment="inverter",
    )
    add_chunk(
        db_session, "c-filter", "doc-inv-a", 6,
        "Replace the air filter every 6 months. Inspect the fan for dust.",
        equipment="inverter",
    )
    add_chunk(
        db_session, "c-fault", "doc-inv-b", 14,
        "Fault F312 indicates an isolation failure on the DC input. "
        "Disconnect the array before servicing.",
        equipment="inverter", fault_code="F312",
    )
    add_chunk(
        db_session, "c-overview", "doc-inv-b", 1,
        "The enclosure is rated IP65 and ships in a grey housing.",
        equipment="inverter",
    )
    add_chunk(
        db_session, "c-battery", "doc-bat", 3,
        "Keep the battery room temperature between 15 and 25 °C.",
        equipment="battery",
    )
    return db_session


def make_candidate(
    chunk_id,
    text,
    similarity=0.5,
    provenance=Provenance.SEMANTIC,
    retrieval_rank=0,
    document_id="doc-1",
    chunk_index=0,
    filename="manual.pdf",
    equipment=None,
):
    return Candidate(
        id=chunk_id,
        document_id=document_id,
        chunk_index=chunk_index,
        text=text,
        filename=filename,
        equipment=equipment,
        similarity=similarity,
        provenance=provenance,
        retrieval_rank=retrieval_rank,
    )


@pytest.fixture
def answer():
    return GeneratedAnswer(
        content="Tighten the terminal bolts to 45 Nm (Source 1).",
        usage=TokenUsage(input_tokens=120, output_tokens=15, total_tokens=135),
    )


@pytest.fixture
def make_services(answer):
    """
    Factory for PipelineServices backed by MagicMocks.

    ``hits`` is what the fake vector index returns for every query.
    """

    def _make(hits=None, generate=None):
        return PipelineServices(
            embed_query=MagicMock(return_value=[0.1, 0.2, 0.3]),
            search_vectors=MagicMock(return_value=list(hits or [])),
            generate_answer=generate or MagicMock(return_value=answer),
        )

    return _make


@pytest.fixture
def default_hits():
    return [
        VectorHit(chunk_id="c-toc", similarity=0.82),
        VectorHit(chunk_id="c-torque", similarity=0.61),
        VectorHit(chunk_id="c-filter", similarity=0.44),
        VectorHit(chunk_id="c-overview", similarity=0.31),
    ]
