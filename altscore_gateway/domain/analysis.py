"""Factor analysis - turns a transaction ledger into five bounded behavioral scores"""

import math
import statistics
from decimal import Decimal
from typing import Iterable, List

from altscore_gateway.domain.models import CreditFactors, Transaction
from altscore_gateway.utils.date_utils import group_by_month

BILL_CATEGORIES = ("utilities", "rent", "phone", "internet", "subscription", "bill", "payment")

BILL_PAYMENT_WIRE_NAME = "billPaymentHistory"


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to [low, high] and round half up to a whole point"""
    if math.isnan(value):
        return low
    return float(math.floor(max(low, min(high, value)) + 0.5))


def _magnitude_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((abs(Decimal(str(t.amount))) for t in transactions), Decimal("0"))


def _income(transactions: List[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.type == "income"]


def _expenses(transactions: List[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.type == "expense"]


def _bill_transactions(transactions: List[Transaction]) -> List[Transaction]:
    return [
        t for t in _expenses(transactions)
        if any(cat in (t.category or "").lower() for cat in BILL_CATEGORIES)
    ]


def bill_payment_history(transactions: List[Transaction]) -> float:
    """
    Score recurring bill payments (rent, utilities, phone, subscriptions).

    Bills are grouped by calendar month and scored on how many distinct
    months show a payment:
    - 6+ months: 95
    - 4-5 months: 85
    - 3 months: 75
    - 2 months: 65
    - 1 month: 55

    Ledgers without any recognizable bill fall back to expense activity
    across months, capped at 75 (60 when there are no expenses at all).
    """
    bills = _bill_transactions(transactions)

    if not bills:
        expenses = _expenses(transactions)
        if not expenses:
            return 60.0
        months_with_expenses = len(group_by_month(expenses))
        if months_with_expenses >= 3:
            return 75.0
        if months_with_expenses >= 2:
            return 65.0
        return 60.0

    months_with_bills = len(group_by_month(bills))
    if months_with_bills >= 6:
        return 95.0
    if months_with_bills >= 4:
        return 85.0
    if months_with_bills >= 3:
        return 75.0
    if months_with_bills >= 2:
        return 65.0
    return 55.0


def income_consistency(transactions: List[Transaction]) -> float:
    """
    Score the stability of monthly income via its coefficient of variation.

    CV bands (lower is steadier):
    - <= 0.1: 100
    - <= 0.3: 90 - 100*CV
    - <= 0.5: 80 - 80*CV
    - <= 1.0: 60 - 40*CV
    - above:  max(30, 40 - 20*CV)

    A longevity bonus of +3 per income month (max +20) is added on top.
    No income scores 30, a single income month scores 70.
    """
    monthly = group_by_month(_income(transactions))
    if not monthly:
        return 30.0
    if len(monthly) == 1:
        return 70.0

    totals = [float(_magnitude_total(txns)) for txns in monthly.values()]
    mean = statistics.fmean(totals)
    cv = statistics.pstdev(totals) / mean if mean > 0 else 1.0

    if cv <= 0.1:
        score = 100.0
    elif cv <= 0.3:
        score = 90 - cv * 100
    elif cv <= 0.5:
        score = 80 - cv * 80
    elif cv <= 1.0:
        score = 60 - cv * 40
    else:
        score = max(30.0, 40 - cv * 20)

    month_bonus = min(20, len(totals) * 3)
    return _clamp(score + month_bonus)


def expense_management(transactions: List[Transaction]) -> float:
    """
    Score spending discipline from the expense-to-income ratio.

    Without income the ratio is undefined and the score is fixed at 40.
    """
    income = _magnitude_total(_income(transactions))
    if income == 0:
        return 40.0

    ratio = float(_magnitude_total(_expenses(transactions)) / income)

    if ratio <= 0.1:
        score = 100.0
    elif ratio <= 0.3:
        score = 95 - ratio * 50
    elif ratio <= 0.5:
        score = 85 - ratio * 40
    elif ratio <= 0.7:
        score = 75 - ratio * 30
    elif ratio <= 0.9:
        score = 60 - (ratio - 0.7) * 100
    else:
        # Spending close to or above earnings
        score = max(20.0, 40 - (ratio - 0.9) * 100)

    return _clamp(score)


def financial_growth(transactions: List[Transaction]) -> float:
    """
    Score the income trend between the first and last income month.

    Growth above 10% is amplified (60 + 200*g); anything else maps to
    50 + 100*g. Fewer than two income months is neutral (50).
    """
    income = _income(transactions)
    if len(income) < 2:
        return 50.0

    monthly = group_by_month(income)
    if len(monthly) < 2:
        return 50.0

    months = list(monthly)
    first = _magnitude_total(monthly[months[0]])
    last = _magnitude_total(monthly[months[-1]])
    if first == 0:
        return 50.0

    growth = float((last - first) / first)
    if growth > 0.1:
        score = 60 + growth * 200
    else:
        score = 50 + growth * 100

    return _clamp(score)


def transaction_diversity(transactions: List[Transaction]) -> float:
    """Score the variety of income sources (categories and payers)"""
    income = _income(transactions)
    if not income:
        return 30.0

    categories = {t.category for t in income if t.category}
    merchants = {t.merchant for t in income if t.merchant}

    score = 50

    if len(categories) >= 5:
        score += 25
    elif len(categories) >= 3:
        score += 20
    elif len(categories) >= 2:
        score += 15
    elif len(categories) >= 1:
        score += 10

    if len(merchants) >= 10:
        score += 25
    elif len(merchants) >= 5:
        score += 20
    elif len(merchants) >= 3:
        score += 15
    elif len(merchants) >= 2:
        score += 10
    elif len(merchants) >= 1:
        score += 5

    return _clamp(score, low=30.0)


def analyze_transactions(transactions: Iterable[Transaction]) -> CreditFactors:
    """
    Derive the five credit factors from a transaction snapshot.

    An empty ledger carries no signal and yields the neutral vector
    (50 for every factor). Factors computed from a fallback signal are
    listed in `low_confidence`.
    """
    sorted_txns = sorted(transactions, key=lambda t: t.date)
    if not sorted_txns:
        return CreditFactors.neutral()

    low_confidence = () if _bill_transactions(sorted_txns) else (BILL_PAYMENT_WIRE_NAME,)

    return CreditFactors(
        bill_payment_history=bill_payment_history(sorted_txns),
        income_consistency=income_consistency(sorted_txns),
        expense_management=expense_management(sorted_txns),
        financial_growth=financial_growth(sorted_txns),
        transaction_diversity=transaction_diversity(sorted_txns),
        low_confidence=low_confidence,
    )
