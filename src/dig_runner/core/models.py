"""Pydantic models for query results."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DnsRecord(BaseModel):
    """One answer record parsed from dig output."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    ttl: int = Field(ge=0)
    data: str


class QueryResult(BaseModel):
    """Outcome of a successful dig invocation."""

    model_config = ConfigDict(frozen=True)

    raw_output: str
    records: List[DnsRecord] = Field(default_factory=list)
    execution_time_ms: str


def format_elapsed_ms(start: float, end: float) -> str:
    """Format the interval between two perf_counter readings in ms."""
    elapsed = max(0.0, (end - start) * 1000)

    return f"{elapsed:.2f}"
