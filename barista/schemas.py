"""
Pydantic Schemas for Command and Response Validation

Order commands arriving as text are parsed into these models so that quantity
and drink validation lives in one place; the admin API serializes its
responses with the same models.

Version: 1.0.0
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from barista.models import DrinkKind


# =============================================================================
# COMMAND SCHEMAS
# =============================================================================

class OrderLine(BaseModel):
    """One ``<qty> <kind>`` part of an order command."""
    quantity: int = Field(..., ge=1, strict=True, examples=[2])
    kind: DrinkKind = Field(..., examples=["tea"])

    def describe(self) -> str:
        return f"{self.quantity} {self.kind.value}"


class OrderRequest(BaseModel):
    """A full order command: one or more lines joined by ``and``."""
    lines: List[OrderLine] = Field(..., min_length=1)

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    def describe(self) -> str:
        return " and ".join(line.describe() for line in self.lines)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class StageCounts(BaseModel):
    """Per-owner item counts, taken from a single registry snapshot."""
    model_config = ConfigDict(frozen=True)

    waiting: int = 0
    preparing: int = 0
    ready: int = 0

    @property
    def in_progress(self) -> int:
        return self.waiting + self.preparing

    @property
    def total(self) -> int:
        return self.waiting + self.preparing + self.ready


class CafeSnapshot(BaseModel):
    """Whole-cafe view used by the state log and the dashboard."""
    clients: int
    waiting_clients: int
    waiting: int
    preparing: int
    ready: int
    capacity: int
    in_flight: int
    accepting_orders: bool = True


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    order_counter: str
    scheduler: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None
