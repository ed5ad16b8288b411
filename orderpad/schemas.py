"""
Pydantic Schemas for Orders and API Request/Response Validation

OrderRecord is the one shape an order has outside the database. JSON uses
camelCase keys (audioUri, transcribedText, ...) to match the stored columns
and the mobile client; Python code uses snake_case.

Author: OrderPad Team
Version: 1.0.0
"""

import time
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel

from orderpad.models import OrderStatus


def format_instant(moment: datetime) -> str:
    """
    Fixed-width UTC form, e.g. ``2026-10-19T18:30:00.000Z``.

    Every stored timestamp uses this layout so that sorting the text sorts
    by time. Naive values are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def now_iso() -> str:
    """Current UTC instant as ISO-8601 with millisecond precision and a Z suffix."""
    return format_instant(datetime.now(timezone.utc))


def new_order_id() -> str:
    """Time-derived order id."""
    return str(time.time_ns())


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ORDER ENTITY
# =============================================================================

class OrderRecord(CamelModel):
    """
    One customer order as persisted.

    Attributes:
        id: Unique order id, generated by the caller
        audio_uri: Locator of the recorded audio; never interpreted here
        transcribed_text: Order text, extended by "add items"
        timestamp: Creation instant (ISO-8601), immutable
        staff_name: Who took the order, immutable
        duration: Recording length for display ("m:ss"), immutable
        table_number: Optional table the order belongs to
        guest_count: Optional number of guests at the table
        status: open or closed
    """
    id: str = Field(..., min_length=1, examples=["1729320000000"])
    audio_uri: str = Field(..., examples=["file:///data/recordings/recording_1729320000000.wav"])
    transcribed_text: str = Field(..., examples=["1x Pepperoni pizza\n2x Diet Coke"])
    timestamp: str = Field(..., examples=["2026-10-19T18:30:00.000Z"])
    staff_name: str = Field(..., examples=["Chef"])
    duration: str = Field(..., examples=["0:15"])
    table_number: Optional[PositiveInt] = Field(None, examples=[12])
    guest_count: Optional[PositiveInt] = Field(None, examples=[4])
    status: OrderStatus = OrderStatus.OPEN

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: str) -> str:
        """Accept any ISO-8601 instant, store it in the one sortable UTC layout."""
        try:
            parsed = datetime.fromisoformat(v)
        except ValueError:
            raise ValueError("timestamp must be an ISO-8601 string")
        return format_instant(parsed)

    @property
    def recorded_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.OPEN

    def share_message(self) -> str:
        """Plain-text summary used when an order is shared with the kitchen."""
        recorded = self.recorded_at.strftime("%Y-%m-%d %H:%M")
        return f"Order from {self.staff_name}\n\n{self.transcribed_text}\n\nRecorded: {recorded}"


class OrderPatch(CamelModel):
    """
    Partial update of the mutable fields of an order.

    Only fields that were explicitly set are written. table_number and
    guest_count may be set to null to clear them.
    """
    transcribed_text: Optional[str] = None
    table_number: Optional[PositiveInt] = None
    guest_count: Optional[PositiveInt] = None
    status: Optional[OrderStatus] = None

    @field_validator("transcribed_text", "status")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may not be null")
        return v

    def changes(self) -> dict[str, Any]:
        """Fields to write, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(CamelModel):
    """Request schema for confirming a new order."""
    transcribed_text: str = Field(..., min_length=1, examples=["1x Caesar salad\n1x Lemonade"])
    audio_uri: str = Field(default="", examples=["recording_1729320000000.m4a"])
    staff_name: Optional[str] = Field(None, max_length=100, examples=["Chef"])
    duration: str = Field(default="0:00", pattern=r"^\d+:\d{2}$", examples=["0:15"])
    table_number: Optional[PositiveInt] = Field(None, examples=[12])
    guest_count: Optional[PositiveInt] = Field(None, examples=[4])

    @field_validator("transcribed_text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Order text may not be blank")
        return v


class AppendItemsRequest(CamelModel):
    """Items recorded later for an existing order."""
    text: str = Field(..., min_length=1, examples=["1x Tiramisu"])

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Items may not be blank")
        return v


class TranscriptionRequest(CamelModel):
    """Run the transcription pipeline for a finished recording."""
    audio_uri: str = Field(..., min_length=1)


class CredentialUpdate(CamelModel):
    """New API key to store."""
    api_key: str = Field(..., examples=["sk-..."])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderListResponse(CamelModel):
    """Response for listing or searching orders."""
    total: int
    orders: List[OrderRecord]


class ShareMessageResponse(CamelModel):
    """Plain-text order summary for the platform share sheet."""
    order_id: str
    message: str


class TranscriptionResponse(CamelModel):
    """Cleaned order text ready for confirmation."""
    audio_uri: str
    order_text: str
    provider: str


class RecordingStatusResponse(CamelModel):
    """Current state of the shared recording session."""
    state: str
    elapsed_seconds: Optional[float] = None
    provider: str


class AudioHandleResponse(CamelModel):
    """A finished recording."""
    uri: str
    duration_seconds: float
    duration: str


class CredentialStatusResponse(CamelModel):
    """Whether an API key is stored. The key itself is never returned."""
    configured: bool
    masked_key: Optional[str] = None
    provider: str


class ErrorResponse(CamelModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None
    upstream_status: Optional[int] = None


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    database: str
    transcription_service: str
    recording_service: str
    credential_service: str
    timestamp: datetime
