"""End-to-end scoring run: analyze, aggregate, explain, assemble, persist"""

import logging
from typing import Iterable, Optional, Protocol, Sequence

from altscore_gateway.domain.analysis import analyze_transactions
from altscore_gateway.domain.exceptions import (
    ExplanationConfigurationError,
    ExplanationError,
    PersistenceError,
)
from altscore_gateway.domain.models import (
    CreditFactors,
    ExplanationPayload,
    ScoringOutcome,
    Transaction,
)
from altscore_gateway.domain.reports import ReportAssembler, ReportStore
from altscore_gateway.domain.scoring import DEFAULT_WEIGHTS, ScoreWeights, aggregate


class Explainer(Protocol):
    async def explain(
        self,
        factors: CreditFactors,
        transactions: Sequence[Transaction],
        deadline_seconds: Optional[float] = None,
    ) -> ExplanationPayload:
        ...


class ScoringPipeline:
    """
    Runs one scoring request against a transaction snapshot.

    Score and grade never depend on the explanation service or the store:
    explanation failures yield a degraded outcome (no narrative) and store
    failures are reported on the outcome instead of being raised.
    """

    def __init__(
        self,
        explainer: Optional[Explainer],
        store: ReportStore,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
    ):
        self.explainer = explainer
        self.assembler = ReportAssembler(store)
        self.weights = weights

    async def run(
        self,
        user_id: str,
        transactions: Iterable[Transaction],
        deadline_seconds: Optional[float] = None,
    ) -> ScoringOutcome:
        snapshot = tuple(transactions)

        factors = analyze_transactions(snapshot)
        result = aggregate(factors, self.weights)

        explanation = None
        explanation_error = None
        try:
            if self.explainer is None:
                raise ExplanationConfigurationError("No explanation client configured")
            explanation = await self.explainer.explain(factors, snapshot, deadline_seconds)
        except ExplanationError as e:
            explanation_error = e
            logging.warning(
                f"Explanation unavailable, returning degraded result: {e}",
                extra={"user_id": user_id, "step": "explanation_failed"},
            )

        report = self.assembler.assemble(user_id, result, explanation, factors, snapshot)

        report_id = None
        persistence_error = None
        try:
            report_id = self.assembler.save(report)
        except PersistenceError as e:
            persistence_error = e
            logging.error(
                f"Report persistence failed: {e}",
                extra={"user_id": user_id, "report_id": report.id, "step": "report_save_failed"},
            )

        return ScoringOutcome(
            factors=factors,
            result=result,
            report=report,
            explanation=explanation,
            explanation_error=explanation_error,
            report_id=report_id,
            persistence_error=persistence_error,
        )
