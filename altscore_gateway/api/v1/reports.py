"""POST /v1/reports - Alternative credit score report endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from altscore_gateway.api.v1.schemas import ReportRequest, ReportResponse
from altscore_gateway.api.dependencies import get_explanation_client, get_request_id
from altscore_gateway.infrastructure.database.session import get_db
from altscore_gateway.infrastructure.database.repositories import ReportRepository, TransactionRepository
from altscore_gateway.infrastructure.clients.explanation import ExplanationClient
from altscore_gateway.domain.exceptions import InsufficientDataError
from altscore_gateway.domain.models import SCORE_TYPE
from altscore_gateway.domain.pipeline import ScoringPipeline
from altscore_gateway.infrastructure.observability.metrics import record_report, persistence_failures_counter
from altscore_gateway.infrastructure.observability.logging import log_report

router = APIRouter()


@router.post("/reports", response_model=ReportResponse)
async def create_report(
    request_body: ReportRequest,
    request: Request,
    db: Session = Depends(get_db),
    explanation_client: ExplanationClient = Depends(get_explanation_client),
):
    """
    Generate an alternative credit score report from the user's ledger.

    Flow:
    1. Load the user's transaction snapshot
    2. Derive the five credit factors and aggregate score/grade
    3. Ask the generative model chain for a breakdown and recommendations
    4. Persist the report
    5. Return score, grade and narrative (narrative is null if explanation failed)
    """
    start_time = time.time()
    request_id = get_request_id(request)
    user_id = request_body.user_id

    try:
        # 1. Load transaction snapshot
        transactions = TransactionRepository(db).get_transactions_by_user(user_id)
        if not transactions:
            raise InsufficientDataError("No transactions found. Please upload and process documents first.")

        # 2-4. Score, explain, persist
        pipeline = ScoringPipeline(explanation_client, ReportRepository(db))
        outcome = await pipeline.run(user_id, transactions)

    except InsufficientDataError as e:
        logging.warning(f"Insufficient data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if outcome.persistence_error is not None:
        persistence_failures_counter.inc()

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_report(outcome.result.grade, outcome.explained)
    log_report(request_id, user_id, outcome.result.score, outcome.result.grade, outcome.explained, duration_ms)

    explanation = outcome.explanation
    return ReportResponse(
        score=outcome.result.score,
        grade=outcome.result.grade,
        score_type=explanation.score_type if explanation else SCORE_TYPE,
        score_breakdown=explanation.score_breakdown if explanation else None,
        recommendations=explanation.recommendations if explanation else None,
        explained=outcome.explained,
        transaction_count=outcome.report.transaction_count,
        factors=outcome.factors.as_dict(),
        low_confidence_factors=list(outcome.factors.low_confidence),
        period_start=outcome.report.period_start,
        period_end=outcome.report.period_end,
        report_id=outcome.report_id,
    )
