"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class TransactionSchema(BaseModel):
    """Single ledger entry produced by the ingestion pipeline"""

    id: str = Field(..., min_length=1, description="Transaction identifier")
    date: date
    merchant: str = ""
    amount: Decimal = Field(..., description="Signed amount")
    type: Literal["income", "expense"]
    category: str = ""
    status: Literal["cleared", "pending"] = "cleared"


class TransactionBatchRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    transactions: List[TransactionSchema] = Field(..., min_length=1)


class TransactionBatchResponse(BaseModel):
    """Response for POST /v1/transactions"""

    user_id: str
    stored: int


class ReportRequest(BaseModel):
    """Request body for POST /v1/reports"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class ReportResponse(BaseModel):
    """Response for POST /v1/reports; narrative fields are null in degraded mode"""

    score: int
    grade: str
    score_type: str
    score_breakdown: Optional[str] = None
    recommendations: Optional[str] = None
    explained: bool
    transaction_count: int
    factors: Dict[str, float]
    low_confidence_factors: List[str] = []
    period_start: str
    period_end: str
    report_id: Optional[str] = None
