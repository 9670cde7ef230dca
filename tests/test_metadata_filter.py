"""
Tests for metadata filter resolution.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from techassist.core.errors import DataLayerError
from techassist.pipeline.metadata_filter import resolve_document_filter
from techassist.schemas.request import DocumentFilters


class TestResolveDocumentFilter:
    def test_no_filters_means_unrestricted(self, seeded_db):
        assert resolve_document_filter(seeded_db, DocumentFilters()) is None

    def test_single_field(self, seeded_db):
        ids = resolve_document_filter(seeded_db, DocumentFilters(equipment_make="Voltra"))
        assert ids == {"doc-inv-a", "doc-inv-b"}

    def test_fields_are_anded(self, seeded_db):
        ids = resolve_document_filter(
            seeded_db, DocumentFilters(doc_type="manual", site="north", equipment_make="Voltra"),
        )
        assert ids == {"doc-inv-a"}

    def test_upload_date_matches_exact_day(self, seeded_db):
        ids = resolve_document_filter(seeded_db, DocumentFilters(upload_date=date(2024, 5, 12)))
        assert ids == {"doc-inv-b"}

    def test_no_match_returns_empty_set(self, seeded_db):
        ids = resolve_document_filter(seeded_db, DocumentFilters(equipment_make="Acme"))
        assert ids == set()

    def test_contradictory_filters_return_empty_set(self, seeded_db):
        ids = resolve_document_filter(
            seeded_db, DocumentFilters(equipment_make="Cellmax", equipment_model="VX-200"),
        )
        assert ids == set()

    def test_query_failure_is_data_layer_error(self):
        db = MagicMock(spec=Session)
        db.query.return_value.filter.return_value.all.side_effect = OperationalError(
            "SELECT", {}, Exception("no such table: documents"),
        )

        with pytest.raises(DataLayerError, match="no such table"):
            resolve_document_filter(db, DocumentFilters(site="north"))
