"""Report assembly - builds the persistable credit report and hands it to the store"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from altscore_gateway.domain.exceptions import PersistenceError
from altscore_gateway.domain.models import (
    CreditFactors,
    CreditReport,
    ExplanationPayload,
    ScoreResult,
    Transaction,
)
from altscore_gateway.utils.date_utils import period_bounds


class ReportStore(Protocol):
    """Persistence collaborator; owns storage, indexing and retry policy"""

    def save(self, report: CreditReport) -> str:
        ...


def assemble_report(
    user_id: str,
    result: ScoreResult,
    explanation: Optional[ExplanationPayload],
    factors: CreditFactors,
    transactions: Sequence[Transaction],
    generated_at: Optional[datetime] = None,
) -> CreditReport:
    """
    Combine aggregator output and the (optional) narrative into a report.

    The period covers the earliest to latest transaction date whatever the
    input ordering; an empty snapshot gives empty period strings.
    """
    period_start, period_end = period_bounds(t.date for t in transactions)
    generated_at = generated_at or datetime.now(timezone.utc)

    return CreditReport(
        id=str(uuid.uuid4()),
        user_id=user_id,
        generation_date=generated_at.isoformat(),
        score=result.score,
        grade=result.grade,
        factors=factors,
        transaction_count=len(transactions),
        period_start=period_start,
        period_end=period_end,
        explained=explanation is not None,
        score_breakdown=explanation.score_breakdown if explanation else None,
        recommendations=explanation.recommendations if explanation else None,
    )


class ReportAssembler:
    """Assembles reports and performs the single outbound save"""

    def __init__(self, store: ReportStore):
        self.store = store

    def assemble(
        self,
        user_id: str,
        result: ScoreResult,
        explanation: Optional[ExplanationPayload],
        factors: CreditFactors,
        transactions: Sequence[Transaction],
    ) -> CreditReport:
        return assemble_report(user_id, result, explanation, factors, transactions)

    def save(self, report: CreditReport) -> str:
        """
        Hand the report to the store exactly once.

        Raises:
            PersistenceError: The store failed; not retried here
        """
        try:
            report_id = self.store.save(report)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Report store failed: {e}") from e

        logging.info(
            "Report saved",
            extra={"user_id": report.user_id, "report_id": report_id, "step": "report_saved"},
        )
        return report_id
