"""Data access layer for ledger transactions and credit reports"""

import uuid
from decimal import Decimal
from typing import Iterable, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from altscore_gateway.infrastructure.database.models import CreditReportRecord, LedgerTransaction
from altscore_gateway.domain.exceptions import PersistenceError
from altscore_gateway.domain.models import CreditReport, Transaction


class TransactionRepository:
    """Repository for a user's transaction ledger"""

    def __init__(self, db: Session):
        self.db = db

    def add_transactions(self, user_id: str, transactions: Iterable[Transaction]) -> int:
        """Store a batch of ledger entries for a user"""
        count = 0
        for txn in transactions:
            self.db.add(
                LedgerTransaction(
                    user_id=user_id,
                    transaction_id=txn.transaction_id,
                    date=txn.date,
                    merchant=txn.merchant,
                    amount=txn.amount,
                    type=txn.type,
                    category=txn.category,
                    status=txn.status,
                )
            )
            count += 1
        self.db.flush()
        return count

    def get_transactions_by_user(self, user_id: str) -> List[Transaction]:
        """Fetch the user's full ledger ordered by date (the transaction snapshot)"""
        rows = (
            self.db.query(LedgerTransaction)
            .filter(LedgerTransaction.user_id == user_id)
            .order_by(LedgerTransaction.date.asc(), LedgerTransaction.created_at.asc())
            .all()
        )
        return [
            Transaction(
                transaction_id=row.transaction_id,
                date=row.date,
                merchant=row.merchant,
                amount=Decimal(str(row.amount)),
                type=row.type,
                category=row.category,
                status=row.status,
            )
            for row in rows
        ]


class ReportRepository:
    """Report store backed by the credit_report table"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, report: CreditReport) -> str:
        """
        Persist a credit report and commit.

        Raises:
            PersistenceError: Database write failed (session is rolled back)
        """
        db_report = CreditReportRecord(
            id=uuid.UUID(report.id),
            user_id=report.user_id,
            generation_date=report.generation_date,
            score=report.score,
            grade=report.grade,
            factors=report.factors.as_dict(),
            low_confidence_factors=list(report.factors.low_confidence),
            transaction_count=report.transaction_count,
            period_start=report.period_start,
            period_end=report.period_end,
            explained=report.explained,
            score_breakdown=report.score_breakdown,
            recommendations=report.recommendations,
        )
        try:
            self.db.add(db_report)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to save credit report {report.id}: {e}") from e

        return str(db_report.id)
