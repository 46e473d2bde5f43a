"""POST /v1/transactions - Accept a ledger batch from the ingestion pipeline"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from altscore_gateway.api.v1.schemas import TransactionBatchRequest, TransactionBatchResponse
from altscore_gateway.api.dependencies import get_request_id
from altscore_gateway.domain.models import Transaction
from altscore_gateway.infrastructure.database.session import get_db
from altscore_gateway.infrastructure.database.repositories import TransactionRepository

router = APIRouter()


@router.post("/transactions", response_model=TransactionBatchResponse, status_code=201)
def add_transactions(
    request_body: TransactionBatchRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Store extracted transactions in the user's ledger"""
    request_id = get_request_id(request)
    transactions = [
        Transaction(
            transaction_id=txn.id,
            date=txn.date,
            merchant=txn.merchant,
            amount=txn.amount,
            type=txn.type,
            category=txn.category,
            status=txn.status,
        )
        for txn in request_body.transactions
    ]

    try:
        stored = TransactionRepository(db).add_transactions(request_body.user_id, transactions)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to store transactions: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "Transactions stored",
        extra={"request_id": request_id, "user_id": request_body.user_id, "stored": stored},
    )
    return TransactionBatchResponse(user_id=request_body.user_id, stored=stored)
