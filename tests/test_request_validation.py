"""
Tests for request parsing and validation.
"""

from datetime import date

import pytest

from techassist.core.errors import QueryValidationError
from techassist.pipeline.orchestrator import validate_request
from techassist.schemas.request import MAX_HISTORY_LENGTH


class TestValidateRequest:
    def test_minimal_request(self):
        request = validate_request({"question": "  How do I reset fault F312?  "})

        assert request.question == "How do I reset fault F312?"
        assert request.filters.is_empty
        assert request.is_conversation_mode is False
        assert request.history is None

    def test_camel_case_fields(self):
        request = validate_request({
            "question": "Torque for terminal bolts?",
            "documentType": "manual",
            "uploadDate": "2024-03-01",
            "filterSite": "north",
            "equipmentType": "inverter",
            "equipmentMake": "Voltra",
            "equipmentModel": "VX-200",
            "isConversationMode": True,
        })

        filters = request.filters
        assert filters.doc_type == "manual"
        assert filters.upload_date == date(2024, 3, 1)
        assert filters.site == "north"
        assert filters.equipment_make == "Voltra"
        assert filters.equipment_model == "VX-200"
        assert request.equipment_type == "inverter"
        assert request.is_conversation_mode is True

    def test_blank_filters_are_absent(self):
        request = validate_request({"question": "q?", "equipmentMake": "   ", "filterSite": ""})
        assert request.filters.is_empty

    @pytest.mark.parametrize("payload", [
        {},
        {"question": ""},
        {"question": "   "},
        {"question": 42},
        {"question": "x" * 2001},
        {"question": "ok", "equipmentMake": "m" * 201},
        {"question": "ok", "isConversationMode": "yes"},
        {"question": "ok", "history": [{"role": "system", "content": "hi"}]},
        {"question": "ok", "history": [{"role": "user", "content": "c" * 5001}]},
    ])
    def test_rejected(self, payload):
        with pytest.raises(QueryValidationError):
            validate_request(payload)

    @pytest.mark.parametrize("value", ["2024-13-01", "2024-02-30", "01/03/2024", "2024-W01-1", "2024-3-1"])
    def test_invalid_upload_date(self, value):
        with pytest.raises(QueryValidationError, match="uploadDate must be a valid date"):
            validate_request({"question": "ok", "uploadDate": value})

    def test_non_object_body(self):
        with pytest.raises(QueryValidationError, match="must be an object"):
            validate_request(["not", "a", "dict"])

    def test_long_history_keeps_most_recent(self):
        history = [{"role": "user", "content": f"turn {i}"} for i in range(30)]

        request = validate_request({"question": "ok", "history": history})

        assert len(request.history) == MAX_HISTORY_LENGTH
        assert request.history[0].content == "turn 10"
        assert request.history[-1].content == "turn 29"

    def test_validation_error_status(self):
        with pytest.raises(QueryValidationError) as exc_info:
            validate_request({"question": ""})
        assert exc_info.value.status_code == 400
        assert "question" in str(exc_info.value)
