"""Pydantic models for API request/response schemas."""

from typing import List

from pydantic import BaseModel, Field

from dig_runner.core.models import DnsRecord, QueryResult

__all__ = ["DnsRecord", "ErrorResponse", "QueryResponse", "RecordTypesResponse"]


class QueryResponse(QueryResult):
    """Response from the dig endpoint."""


class ErrorResponse(BaseModel):
    """Error body returned for failed lookups."""

    detail: str


class RecordTypesResponse(BaseModel):
    """Record types accepted by the dig endpoint."""

    result: List[str] = Field(default_factory=list)
