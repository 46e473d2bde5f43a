"""Pytest fixtures for testing"""

import json
import os

# Point the app at SQLite before settings are loaded
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from altscore_gateway.api.main import create_app
from altscore_gateway.api.dependencies import get_explanation_client
from altscore_gateway.infrastructure.clients.explanation import ExplanationClient, ExplanationConfig
from altscore_gateway.infrastructure.database.models import Base
from altscore_gateway.infrastructure.database.session import get_db
from altscore_gateway.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_MODELS = ("model-a", "model-b", "model-c", "model-d")


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def explanation_config() -> ExplanationConfig:
    """Four-model chain with a test credential"""
    return ExplanationConfig(
        api_key="test-key",
        api_base="https://genai.test/v1beta",
        models=TEST_MODELS,
        call_timeout_seconds=5.0,
        deadline_seconds=30.0,
    )


@pytest.fixture
def client(db: Session, explanation_config: ExplanationConfig) -> TestClient:
    """Create FastAPI test client with test database and explanation config"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_explanation_client] = lambda: ExplanationClient(explanation_config)
    return TestClient(app)


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for ledger entries with sensible defaults"""
    counter = {"n": 0}

    def _make(
        day: date,
        amount,
        type: str = "income",
        category: str = "salary",
        merchant: str = "Employer",
        status: str = "cleared",
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            transaction_id=f"txn_{counter['n']}",
            date=day,
            merchant=merchant,
            amount=Decimal(str(amount)),
            type=type,
            category=category,
            status=status,
        )

    return _make


@pytest.fixture
def sample_transactions(make_txn) -> List[Transaction]:
    """Six months of steady earnings, rent and utilities between 2024-01-05 and 2024-06-20"""
    transactions = []

    for month in range(1, 7):
        transactions.append(make_txn(date(2024, month, 5), 3000, category="salary", merchant="Market Stall"))
        transactions.append(make_txn(date(2024, month, 12), 400, category="delivery", merchant=f"Courier {month % 3}"))
        transactions.append(make_txn(date(2024, month, 10), -900, type="expense", category="Rent", merchant="Landlord"))
        transactions.append(
            make_txn(date(2024, month, 15), -80, type="expense", category="Utilities", merchant="Power Co")
        )

    transactions.append(make_txn(date(2024, 6, 20), -150, type="expense", category="groceries", merchant="Shop"))
    return transactions


def valid_model_response(**overrides) -> str:
    """JSON body a well-behaved model would return"""
    body = {
        "creditScore": 820,
        "riskGrade": "A",
        "scoreBreakdown": "Bill Payment: 95/100 * 30% = 28.5 points ...",
        "recommendations": "1. Keep paying rent on time. 2. Add a second income source.",
        "scoreType": "Alternative Credit Score",
    }
    body.update(overrides)
    return json.dumps(body)


@pytest.fixture
def model_response() -> Callable[..., str]:
    return valid_model_response
