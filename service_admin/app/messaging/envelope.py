"""
Event envelope wrapping domain payloads before publishing.

Wire format (camelCase)::

    {
      "eventId": "1718000000000-k3j9x0a",
      "eventType": "payment.processed",
      "timestamp": "2024-06-10T06:13:20.000Z",
      "source": "admin-service",
      "data": {...},
      "metadata": {"traceId": "...", "spanId": "...", "correlationId": "...", "version": "1.0"}
    }
"""

from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, Field

EVENT_SOURCE = "admin-service"
SCHEMA_VERSION = "1.0"
NO_TRACE = "no-trace"
NO_SPAN = "no-span"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class EventMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    trace_id: str = Field(alias="traceId")
    span_id: str = Field(alias="spanId")
    correlation_id: Optional[str] = Field(default=None, alias="correlationId")
    version: str = SCHEMA_VERSION


class EventEnvelope(BaseModel):
    """Uniform wrapper around a published domain event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_id: str = Field(alias="eventId")
    event_type: str = Field(alias="eventType")
    timestamp: str
    source: str = EVENT_SOURCE
    data: Any = None
    metadata: EventMetadata

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire schema."""
        wire = self.model_dump(by_alias=True, mode="json")
        if wire["metadata"].get("correlationId") is None:
            wire["metadata"].pop("correlationId", None)
        return wire


def generate_event_id() -> str:
    """Millisecond timestamp plus a random base36 suffix; best-effort unique."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"{int(time.time() * 1000)}-{suffix}"


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _span_ids() -> tuple[Optional[str], Optional[str]]:
    span = trace.get_current_span()
    if span is None or not span.is_recording():
        return None, None
    ctx = span.get_span_context()
    trace_id = f"{ctx.trace_id:032x}" if ctx.trace_id else None
    span_id = f"{ctx.span_id:016x}" if ctx.span_id else None
    return trace_id, span_id


def build_envelope(topic: str, payload: Any, correlation_id: Optional[str] = None) -> EventEnvelope:
    """Wrap ``payload`` for publishing on ``topic``."""
    fields: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    payload_trace = fields.get("traceId") or None
    active_trace, active_span = _span_ids()

    trace_id = payload_trace or active_trace or NO_TRACE
    span_id = fields.get("spanId") or active_span or NO_SPAN

    return EventEnvelope(
        event_id=generate_event_id(),
        event_type=topic,
        timestamp=_iso_now(),
        data=payload,
        metadata=EventMetadata(
            trace_id=str(trace_id),
            span_id=str(span_id),
            correlation_id=correlation_id or (str(payload_trace) if payload_trace else NO_TRACE),
        ),
    )
