"""Score aggregation - core business logic for the alternative credit score"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from altscore_gateway.domain.models import CreditFactors, ScoreResult

MAX_SCORE = 1000


@dataclass(frozen=True)
class ScoreWeights:
    """
    Factor weights for the weighted average.

    Weights:
    - 30%: Bill payment history (rent, utilities, mobile bills)
    - 25%: Income consistency (regular earning patterns)
    - 20%: Expense management (spending discipline & savings)
    - 15%: Financial growth (income trend over time)
    - 10%: Transaction diversity (multiple income sources)
    """

    bill_payment_history: Decimal = Decimal("0.30")
    income_consistency: Decimal = Decimal("0.25")
    expense_management: Decimal = Decimal("0.20")
    financial_growth: Decimal = Decimal("0.15")
    transaction_diversity: Decimal = Decimal("0.10")

    def __post_init__(self):
        total = (
            self.bill_payment_history
            + self.income_consistency
            + self.expense_management
            + self.financial_growth
            + self.transaction_diversity
        )
        if total != Decimal("1"):
            raise ValueError(f"Score weights must sum to 1, got {total}")

    def as_dict(self) -> dict:
        return {
            "billPaymentHistory": self.bill_payment_history,
            "incomeConsistency": self.income_consistency,
            "expenseManagement": self.expense_management,
            "financialGrowth": self.financial_growth,
            "transactionDiversity": self.transaction_diversity,
        }


DEFAULT_WEIGHTS = ScoreWeights()


def calculate_weighted_score(factors: CreditFactors, weights: ScoreWeights = DEFAULT_WEIGHTS) -> int:
    """
    Weighted average of the factors (0-100), scaled to 0-1000.

    Decimal arithmetic keeps the .5 boundary exact, so 69.75 scales to
    697.5 and rounds half up to 698.
    """
    factor_values = factors.as_dict()
    weighted = sum(
        (Decimal(str(factor_values[name])) * weight for name, weight in weights.as_dict().items()),
        Decimal("0"),
    )

    score = int((weighted * 10).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(MAX_SCORE, score))


def determine_grade(score: int) -> str:
    """
    Map score to risk grade.

    Grade bands:
    - 800-1000: A  (excellent - very low risk)
    - 700-799:  B+ (good - low risk)
    - 600-699:  B  (fair - moderate risk)
    - 500-599:  C  (needs improvement - higher risk)
    - 0-499:    D  (poor - high risk)
    """
    if score >= 800:
        return "A"
    elif score >= 700:
        return "B+"
    elif score >= 600:
        return "B"
    elif score >= 500:
        return "C"
    else:
        return "D"


def aggregate(factors: CreditFactors, weights: ScoreWeights = DEFAULT_WEIGHTS) -> ScoreResult:
    """Main entry point: combine factors into a score and grade"""
    score = calculate_weighted_score(factors, weights)
    return ScoreResult(score=score, grade=determine_grade(score))
