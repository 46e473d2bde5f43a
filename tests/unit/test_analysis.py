"""Unit tests for credit factor analysis"""

import random
from datetime import date

from altscore_gateway.domain.analysis import (
    analyze_transactions,
    bill_payment_history,
    expense_management,
    financial_growth,
    income_consistency,
    transaction_diversity,
)
from altscore_gateway.domain.models import CreditFactors


def test_analyze_transactions_empty_is_neutral():
    """Empty ledger carries no signal and no penalty"""
    factors = analyze_transactions([])

    assert factors == CreditFactors(50.0, 50.0, 50.0, 50.0, 50.0)
    assert factors.low_confidence == ()


def test_single_income_transaction(make_txn):
    """One income month: consistency 70, growth neutral"""
    factors = analyze_transactions([make_txn(date(2024, 3, 1), 500)])

    assert factors.income_consistency == 70
    assert factors.financial_growth == 50
    assert factors.expense_management == 100  # No expenses at all
    assert factors.bill_payment_history == 60  # No expenses, fallback neutral
    assert factors.transaction_diversity == 65  # 1 category (+10), 1 merchant (+5)


def test_sample_ledger_factors(sample_transactions):
    """Six months of rent/utilities and steady income"""
    factors = analyze_transactions(sample_transactions)

    assert factors.bill_payment_history == 95
    assert factors.income_consistency == 100
    assert factors.expense_management == 80  # ratio 6030 / 20400 = 0.296
    assert factors.financial_growth == 50
    assert factors.transaction_diversity == 80  # 2 categories (+15), 4 merchants (+15)
    assert factors.low_confidence == ()


def test_analyze_transactions_ignores_input_order(sample_transactions):
    shuffled = list(sample_transactions)
    random.Random(7).shuffle(shuffled)

    assert analyze_transactions(shuffled) == analyze_transactions(sample_transactions)


def test_bill_payment_history_month_steps(make_txn):
    """Score steps with the number of distinct months containing a bill"""
    def bills(months):
        return [
            make_txn(date(2024, m, 3), -50, type="expense", category="Electricity Bill")
            for m in range(1, months + 1)
        ]

    assert bill_payment_history(bills(1)) == 55
    assert bill_payment_history(bills(2)) == 65
    assert bill_payment_history(bills(3)) == 75
    assert bill_payment_history(bills(4)) == 85
    assert bill_payment_history(bills(5)) == 85
    assert bill_payment_history(bills(6)) == 95
    assert bill_payment_history(bills(9)) == 95


def test_bill_payment_history_counts_months_not_payments(make_txn):
    """Several bills in the same month count once"""
    transactions = [
        make_txn(date(2024, 1, 1), -500, type="expense", category="rent"),
        make_txn(date(2024, 1, 9), -30, type="expense", category="phone"),
        make_txn(date(2024, 1, 20), -12, type="expense", category="Subscription"),
    ]

    assert bill_payment_history(transactions) == 55


def test_bill_payment_history_ignores_income_in_bill_categories(make_txn):
    """Only expenses can be bill payments"""
    transactions = [make_txn(date(2024, m, 1), 100, category="rent") for m in range(1, 7)]

    assert bill_payment_history(transactions) == 60


def test_bill_payment_history_fallback_is_capped(make_txn):
    """Without bill categories, expense activity is used with a lower ceiling"""
    def groceries(months):
        return [
            make_txn(date(2024, m, 8), -40, type="expense", category="groceries")
            for m in range(1, months + 1)
        ]

    assert bill_payment_history(groceries(1)) == 60
    assert bill_payment_history(groceries(2)) == 65
    assert bill_payment_history(groceries(3)) == 75
    assert bill_payment_history(groceries(12)) == 75


def test_bill_payment_fallback_flagged_low_confidence(make_txn):
    transactions = [
        make_txn(date(2024, 1, 1), 1000),
        make_txn(date(2024, 1, 2), -40, type="expense", category="groceries"),
    ]

    factors = analyze_transactions(transactions)

    assert factors.low_confidence == ("billPaymentHistory",)


def test_income_consistency_no_income(make_txn):
    transactions = [make_txn(date(2024, 1, 1), -40, type="expense", category="food")]

    assert income_consistency(transactions) == 30


def test_income_consistency_steady_income(make_txn):
    """CV of zero scores 100 (bonus cannot push past the ceiling)"""
    transactions = [make_txn(date(2024, m, 1), 1000) for m in range(1, 4)]

    assert income_consistency(transactions) == 100


def test_income_consistency_variable_income(make_txn):
    """Totals 1000 and 2000: CV = 500 / 1500 = 0.333, score 80 - 26.7 + 6 bonus"""
    transactions = [
        make_txn(date(2024, 1, 1), 1000),
        make_txn(date(2024, 2, 1), 600),
        make_txn(date(2024, 2, 15), 1400),
    ]

    assert income_consistency(transactions) == 59


def test_income_consistency_erratic_income(make_txn):
    """Totals 100 and 1000: CV = 0.818, score 60 - 32.7 + 6 bonus"""
    transactions = [
        make_txn(date(2024, 1, 1), 100),
        make_txn(date(2024, 2, 1), 1000),
    ]

    assert income_consistency(transactions) == 33


def test_income_consistency_zero_amounts(make_txn):
    """Zero mean degrades to CV = 1 instead of dividing by zero"""
    transactions = [make_txn(date(2024, 1, 1), 0), make_txn(date(2024, 2, 1), 0)]

    assert income_consistency(transactions) == 26


def test_expense_management_ratios(make_txn):
    def ledger(expense):
        return [
            make_txn(date(2024, 1, 1), 1000),
            make_txn(date(2024, 1, 2), -expense, type="expense", category="food"),
        ]

    assert expense_management(ledger(50)) == 100  # ratio 0.05
    assert expense_management(ledger(200)) == 85  # 95 - 0.2 * 50
    assert expense_management(ledger(500)) == 65  # 85 - 0.5 * 40
    assert expense_management(ledger(800)) == 50  # 60 - 0.1 * 100
    assert expense_management(ledger(1200)) == 20  # Overspending floors at 20


def test_expense_management_sign_agnostic(make_txn):
    """Positive and negative expense amounts score the same"""
    negative = [
        make_txn(date(2024, 1, 1), 1000),
        make_txn(date(2024, 1, 2), -500, type="expense", category="food"),
    ]
    positive = [
        make_txn(date(2024, 1, 1), 1000),
        make_txn(date(2024, 1, 2), 500, type="expense", category="food"),
    ]

    assert expense_management(negative) == expense_management(positive) == 65


def test_expense_management_without_income(make_txn):
    transactions = [make_txn(date(2024, 1, 2), -500, type="expense", category="food")]

    assert expense_management(transactions) == 40


def test_financial_growth_trends(make_txn):
    def ledger(first, last):
        return [make_txn(date(2024, 1, 5), first), make_txn(date(2024, 4, 5), last)]

    assert financial_growth(ledger(1000, 1050)) == 55  # Stable: 50 + 5
    assert financial_growth(ledger(1000, 1500)) == 100  # Strong growth, clamped
    assert financial_growth(ledger(1000, 1150)) == 90  # 60 + 0.15 * 200
    assert financial_growth(ledger(1000, 800)) == 30  # Declining
    assert financial_growth(ledger(1000, 300)) == 0  # Steep decline, clamped


def test_financial_growth_needs_two_months(make_txn):
    same_month = [make_txn(date(2024, 1, 1), 1000), make_txn(date(2024, 1, 20), 4000)]

    assert financial_growth(same_month) == 50


def test_financial_growth_zero_first_month(make_txn):
    transactions = [make_txn(date(2024, 1, 1), 0), make_txn(date(2024, 2, 1), 4000)]

    assert financial_growth(transactions) == 50


def test_transaction_diversity_tiers(make_txn):
    diverse = [
        make_txn(date(2024, 1, i + 1), 100, category=f"cat{i % 5}", merchant=f"payer{i}")
        for i in range(10)
    ]
    modest = [
        make_txn(date(2024, 1, 1), 100, category="salary", merchant="A"),
        make_txn(date(2024, 1, 2), 100, category="tips", merchant="B"),
        make_txn(date(2024, 1, 3), 100, category="tips", merchant="C"),
    ]

    assert transaction_diversity(diverse) == 100
    assert transaction_diversity(modest) == 80  # 2 categories (+15), 3 merchants (+15)


def test_transaction_diversity_ignores_blank_sources(make_txn):
    transactions = [make_txn(date(2024, 1, 1), 100, category="", merchant="")]

    assert transaction_diversity(transactions) == 50


def test_transaction_diversity_without_income(make_txn):
    transactions = [make_txn(date(2024, 1, 1), -100, type="expense", category="food")]

    assert transaction_diversity(transactions) == 30


def test_factors_always_bounded(make_txn):
    """Extreme ledgers never push a factor outside [0, 100]"""
    ledgers = [
        [make_txn(date(2024, 1, 1), 0, type="expense", category="rent")],
        [make_txn(date(2024, 1, 1), 10**9), make_txn(date(2024, 2, 1), 1)],
        [make_txn(date(2024, 1, 1), 1), make_txn(date(2024, 12, 1), 10**9)],
        [
            make_txn(date(2024, 1, 1), 1),
            make_txn(date(2024, 1, 2), -(10**9), type="expense", category="bill"),
        ],
        [make_txn(date(2024, m, 1), m * 37 % 11, status="pending") for m in range(1, 13)],
    ]

    for ledger in ledgers:
        for value in analyze_transactions(ledger).as_dict().values():
            assert 0 <= value <= 100
