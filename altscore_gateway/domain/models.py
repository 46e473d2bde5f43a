"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from altscore_gateway.domain.exceptions import ExplanationError, PersistenceError

SCORE_TYPE = "Alternative Credit Score"
GRADES = ("A", "B+", "B", "C", "D")


@dataclass(frozen=True)
class Transaction:
    """Ledger entry extracted from a receipt, bill or mobile-money record"""

    transaction_id: str
    date: date
    merchant: str
    amount: Decimal  # Signed; factor math uses the magnitude
    type: str  # "income" or "expense"
    category: str
    status: str = "cleared"  # "cleared" or "pending"


@dataclass(frozen=True)
class CreditFactors:
    """Five behavioral sub-scores, each in [0, 100]"""

    bill_payment_history: float
    income_consistency: float
    expense_management: float
    financial_growth: float
    transaction_diversity: float
    # Wire names of factors computed from a fallback signal
    low_confidence: Tuple[str, ...] = field(default=())

    @classmethod
    def neutral(cls) -> "CreditFactors":
        return cls(50.0, 50.0, 50.0, 50.0, 50.0)

    def as_dict(self) -> Dict[str, float]:
        return {
            "billPaymentHistory": self.bill_payment_history,
            "incomeConsistency": self.income_consistency,
            "expenseManagement": self.expense_management,
            "financialGrowth": self.financial_growth,
            "transactionDiversity": self.transaction_diversity,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Aggregated score on the 0-1000 scale and its grade band"""

    score: int
    grade: str


@dataclass(frozen=True)
class ExplanationPayload:
    """Validated narrative returned by the generative language service"""

    score_breakdown: str
    recommendations: str
    model: str
    score_type: str = SCORE_TYPE


@dataclass(frozen=True)
class CreditReport:
    """Persistable record of one scoring run"""

    id: str
    user_id: str
    generation_date: str
    score: int
    grade: str
    factors: CreditFactors
    transaction_count: int
    period_start: str
    period_end: str
    explained: bool
    score_breakdown: Optional[str] = None
    recommendations: Optional[str] = None


@dataclass
class ScoringOutcome:
    """
    Result of a full pipeline run.

    Score and grade are always present. The narrative is optional: when the
    explanation stage failed, `explanation` is None and `explanation_error`
    says why. The same applies to persistence and `report_id`.
    """

    factors: CreditFactors
    result: ScoreResult
    report: CreditReport
    explanation: Optional[ExplanationPayload] = None
    explanation_error: Optional[ExplanationError] = None
    report_id: Optional[str] = None
    persistence_error: Optional[PersistenceError] = None

    @property
    def explained(self) -> bool:
        return self.explanation is not None
