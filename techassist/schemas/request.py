"""
Request schemas for the query API.

Field names are snake_case in Python and camelCase on the wire
(``documentType``, ``isConversationMode`` ...).  Limits mirror the
public contract: question ≤ 2000 chars, filters ≤ 200 chars, history
content ≤ 5000 chars per message.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, StrictBool, field_validator

MAX_QUESTION_LENGTH = 2000
MAX_FILTER_LENGTH = 200
MAX_HISTORY_LENGTH = 20
MAX_HISTORY_CONTENT_LENGTH = 5000

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class ConversationMessage(BaseModel):
    """One caller-supplied conversation turn.  Never persisted."""
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=MAX_HISTORY_CONTENT_LENGTH)


class DocumentFilters(BaseModel):
    """Document-level metadata constraints, combined with AND."""
    doc_type: str | None = None
    upload_date: date | None = None
    site: str | None = None
    equipment_make: str | None = None
    equipment_model: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class RAGQueryRequest(BaseModel):
    question: str = Field(..., max_length=MAX_QUESTION_LENGTH)
    document_type: str | None = Field(default=None, alias="documentType", max_length=MAX_FILTER_LENGTH)
    upload_date: str | None = Field(default=None, alias="uploadDate")
    filter_site: str | None = Field(default=None, alias="filterSite", max_length=MAX_FILTER_LENGTH)
    equipment_type: str | None = Field(default=None, alias="equipmentType", max_length=MAX_FILTER_LENGTH)
    equipment_make: str | None = Field(default=None, alias="equipmentMake", max_length=MAX_FILTER_LENGTH)
    equipment_model: str | None = Field(default=None, alias="equipmentModel", max_length=MAX_FILTER_LENGTH)
    history: list[ConversationMessage] | None = None
    is_conversation_mode: StrictBool = Field(default=False, alias="isConversationMode")

    class Config:
        populate_by_name = True

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question must not be empty")
        return v

    @field_validator(
        "document_type", "filter_site", "equipment_type",
        "equipment_make", "equipment_model",
    )
    @classmethod
    def _blank_filter_is_absent(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("upload_date")
    @classmethod
    def _iso_date(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            if not _ISO_DATE.fullmatch(v):
                raise ValueError
            date.fromisoformat(v)
        except ValueError:
            raise ValueError("uploadDate must be a valid date in YYYY-MM-DD format")
        return v

    @field_validator("history")
    @classmethod
    def _keep_recent_history(
        cls, v: list[ConversationMessage] | None,
    ) -> list[ConversationMessage] | None:
        if v is None:
            return None
        return v[-MAX_HISTORY_LENGTH:]

    @property
    def filters(self) -> DocumentFilters:
        return DocumentFilters(
            doc_type=self.document_type,
            upload_date=date.fromisoformat(self.upload_date) if self.upload_date else None,
            site=self.filter_site,
            equipment_make=self.equipment_make,
            equipment_model=self.equipment_model,
        )


class SearchRequest(BaseModel):
    query: str = Field(..., max_length=MAX_QUESTION_LENGTH)

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Query is required")
        return v
