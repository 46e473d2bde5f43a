"""SQLAlchemy ORM models for the ledger and credit reports"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LedgerTransaction(Base):
    """Transaction handed over by the ingestion pipeline"""

    __tablename__ = "ledger_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    transaction_id = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    merchant = Column(Text, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String(16), nullable=False)
    category = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="cleared")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CreditReportRecord(Base):
    """Credit report from one scoring run; written once, never updated"""

    __tablename__ = "credit_report"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    generation_date = Column(Text, nullable=False)
    score = Column(Integer, nullable=False)
    grade = Column(String(2), nullable=False)
    factors = Column(JSON, nullable=False)
    low_confidence_factors = Column(JSON, nullable=False, default=list)
    transaction_count = Column(Integer, nullable=False)
    period_start = Column(Text, nullable=False, default="")
    period_end = Column(Text, nullable=False, default="")
    explained = Column(Boolean, nullable=False, default=False)
    score_breakdown = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
