"""Pydantic models for the accrual system (scoring oracle) responses."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AccrualResponse(BaseModel):
    """GET /api/orders/{number} 200 응답"""

    order: str
    status: str
    accrual: Optional[Decimal] = Field(None, ge=0)
