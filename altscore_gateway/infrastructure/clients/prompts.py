"""Prompt construction and strict response schema for the explanation service"""

import json
from typing import Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from altscore_gateway.domain.exceptions import FailureKind, ProviderFailure
from altscore_gateway.domain.models import (
    SCORE_TYPE,
    CreditFactors,
    ExplanationPayload,
    Transaction,
)
from altscore_gateway.domain.scoring import DEFAULT_WEIGHTS, ScoreWeights
from altscore_gateway.utils.date_utils import period_bounds

FACTOR_LABELS = {
    "billPaymentHistory": "Bill Payment History",
    "incomeConsistency": "Income Consistency",
    "expenseManagement": "Expense Management",
    "financialGrowth": "Financial Growth",
    "transactionDiversity": "Transaction Diversity",
}


class ExplanationResponse(BaseModel):
    """Output contract the model must honor; anything else is rejected, not coerced"""

    model_config = ConfigDict(strict=True, extra="forbid")

    credit_score: float = Field(alias="creditScore", ge=0, le=1000)
    risk_grade: Literal["A", "B+", "B", "C", "D"] = Field(alias="riskGrade")
    score_breakdown: str = Field(alias="scoreBreakdown", min_length=1)
    recommendations: str = Field(min_length=1)
    score_type: Literal["Alternative Credit Score"] = Field(default=SCORE_TYPE, alias="scoreType")


def build_prompt(
    factors: CreditFactors,
    transactions: Sequence[Transaction],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> str:
    """Render the analyst prompt with weighted factor values and the JSON output contract"""
    factor_values = factors.as_dict()
    factor_lines = "\n".join(
        f"  {FACTOR_LABELS[name]}: {factor_values[name]:g} (Weight: {int(weight * 100)}%)"
        for name, weight in weights.as_dict().items()
    )
    period_start, period_end = period_bounds(t.date for t in transactions)
    period = f"{period_start} to {period_end}" if period_start else "no dated transactions"

    notes = ""
    if factors.low_confidence:
        low = ", ".join(FACTOR_LABELS.get(name, name) for name in factors.low_confidence)
        notes = f"\n  Low-confidence factors (estimated from a weaker fallback signal): {low}\n"

    return f"""You are an AI credit analyst specializing in Alternative Credit Scoring for the informal economy.

  IMPORTANT: This is NOT a traditional FICO score. This is an Alternative Credit Score designed for
  gig workers, street vendors, cash-based workers, mobile wallet users and anyone without
  traditional credit cards or bank loans.

  Scoring Factors (0-1000 scale):
  1. Bill Payment History (30%): Rent, utilities, mobile bills - on-time payment patterns
  2. Income Consistency (25%): Regular earning patterns, variance in monthly income
  3. Expense Management (20%): Spending discipline & savings behavior
  4. Financial Growth (15%): Income trend over time
  5. Transaction Diversity (10%): Variety of income sources

  Algorithm:
  1. Take each factor score (0-100) provided below
  2. Apply weighted average: (BPH*0.30) + (IC*0.25) + (EM*0.20) + (FG*0.15) + (TD*0.10)
  3. Scale result to 0-1000 range
  4. Assign risk grade:
     - A (800-1000): Excellent - Very low risk
     - B+ (700-799): Good - Low risk
     - B (600-699): Fair - Moderate risk
     - C (500-599): Needs improvement - Higher risk
     - D (<500): Poor - High risk

  Input Scores:
{factor_lines}

  Ledger: {len(transactions)} transactions, {period}
{notes}
  Tasks:
  1. Calculate the Alternative Credit Score (0-1000)
  2. Assign the risk grade (A/B+/B/C/D)
  3. Provide a detailed breakdown showing how each factor contributed
     (e.g. "Bill Payment: 85/100 * 30% = 25.5 points"), the weighted sum and the scaling
  4. Provide 3-5 personalized, actionable recommendations focused on the lowest factors
  5. Include "scoreType": "{SCORE_TYPE}" in the response

  Return ONLY a JSON object with exactly these fields and no others:
  {{
    "creditScore": number (0-1000),
    "riskGrade": string, one of "A", "B+", "B", "C", "D",
    "scoreBreakdown": string,
    "recommendations": string,
    "scoreType": "{SCORE_TYPE}"
  }}
"""


def parse_explanation(model: str, raw: str) -> ExplanationPayload:
    """
    Parse and validate a model response.

    Raises:
        ProviderFailure: PARSE for malformed JSON, VALIDATION for schema violations
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ProviderFailure(model, FailureKind.PARSE, f"response is not valid JSON: {e}") from e

    try:
        response = ExplanationResponse.model_validate(data)
    except ValidationError as e:
        raise ProviderFailure(
            model, FailureKind.VALIDATION, f"{e.error_count()} schema violation(s)"
        ) from e

    return ExplanationPayload(
        score_breakdown=response.score_breakdown,
        recommendations=response.recommendations,
        score_type=response.score_type,
        model=model,
    )
