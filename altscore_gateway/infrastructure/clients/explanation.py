"""Generative language API client with an ordered model fallback chain"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import httpx

from altscore_gateway.config import Settings, settings
from altscore_gateway.domain.exceptions import (
    ExplanationConfigurationError,
    ExplanationExhausted,
    FailureKind,
    ProviderFailure,
)
from altscore_gateway.domain.models import CreditFactors, ExplanationPayload, Transaction
from altscore_gateway.domain.scoring import DEFAULT_WEIGHTS, ScoreWeights
from altscore_gateway.infrastructure.clients.prompts import build_prompt, parse_explanation
from altscore_gateway.infrastructure.observability.metrics import (
    explanation_attempts_counter,
    explanation_exhausted_counter,
    explanation_latency_histogram,
)


# Remaining budget below this cannot complete a call
MIN_ATTEMPT_SECONDS = 0.01


@dataclass(frozen=True)
class ExplanationConfig:
    """Immutable client configuration, shared read-only across requests"""

    api_key: Optional[str]
    api_base: str
    models: Tuple[str, ...]
    call_timeout_seconds: float
    deadline_seconds: float
    temperature: float = 0.7
    top_p: float = 0.95
    top_k: int = 40
    max_output_tokens: int = 2048

    @classmethod
    def from_settings(cls, source: Settings) -> "ExplanationConfig":
        return cls(
            api_key=source.google_genai_api_key,
            api_base=source.genai_api_base.rstrip("/"),
            models=tuple(source.explanation_models),
            call_timeout_seconds=source.explanation_call_timeout_seconds,
            deadline_seconds=source.explanation_deadline_seconds,
            temperature=source.explanation_temperature,
            top_p=source.explanation_top_p,
            top_k=source.explanation_top_k,
            max_output_tokens=source.explanation_max_output_tokens,
        )


class ExplanationClient:
    """Client for the external generative language service"""

    def __init__(
        self,
        config: ExplanationConfig | None = None,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ExplanationConfig.from_settings(settings)
        self.weights = weights
        self.transport = transport

    async def explain(
        self,
        factors: CreditFactors,
        transactions: Sequence[Transaction],
        deadline_seconds: float | None = None,
    ) -> ExplanationPayload:
        """
        Ask each model in priority order for a breakdown and recommendations.

        Escalation is strictly sequential: a candidate is tried only after the
        previous one failed (transport, parse or validation). The first payload
        that passes validation wins. Each call is bounded by the smaller of the
        per-call timeout and what remains of the overall deadline; no new
        candidate starts once the deadline is spent.

        Raises:
            ExplanationConfigurationError: No API key configured (no call is made)
            ExplanationExhausted: Every candidate failed or the deadline ran out
        """
        if not self.config.api_key:
            raise ExplanationConfigurationError("GOOGLE_GENAI_API_KEY is not configured")

        prompt = build_prompt(factors, transactions, self.weights)
        budget = self.config.deadline_seconds if deadline_seconds is None else deadline_seconds

        loop = asyncio.get_running_loop()
        deadline = loop.time() + budget
        attempts: List[ProviderFailure] = []
        last_error: ProviderFailure | None = None

        for attempt, model in enumerate(self.config.models, start=1):
            remaining = deadline - loop.time()
            if remaining < MIN_ATTEMPT_SECONDS:
                last_error = ProviderFailure(model, FailureKind.TRANSPORT, "request deadline exhausted")
                attempts.append(last_error)
                explanation_attempts_counter.labels(model=model, outcome="deadline").inc()
                logging.warning(
                    "Explanation deadline exhausted",
                    extra={"model": model, "attempt": attempt, "step": "explanation_deadline"},
                )
                break

            timeout = min(self.config.call_timeout_seconds, remaining)
            logging.info(
                f"Trying model: {model}",
                extra={"model": model, "attempt": attempt, "step": "explanation_attempt"},
            )

            try:
                with explanation_latency_histogram.labels(model=model).time():
                    try:
                        raw = await asyncio.wait_for(self._generate(model, prompt, timeout), timeout)
                    except asyncio.TimeoutError as e:
                        raise ProviderFailure(
                            model, FailureKind.TRANSPORT, f"timeout after {timeout:.1f}s"
                        ) from e
                payload = parse_explanation(model, raw)

            except ProviderFailure as e:
                last_error = e
                attempts.append(e)
                explanation_attempts_counter.labels(model=model, outcome=e.kind.value).inc()
                logging.warning(
                    f"Model {model} failed: {e}",
                    extra={"model": model, "attempt": attempt, "failure_kind": e.kind.value},
                )
                continue

            explanation_attempts_counter.labels(model=model, outcome="success").inc()
            logging.info(
                f"Success with model: {model}",
                extra={"model": model, "attempt": attempt, "step": "explanation_success"},
            )
            return payload

        explanation_exhausted_counter.inc()
        raise ExplanationExhausted(
            f"All models failed after {len(attempts)} attempt(s). Last error: {last_error}",
            attempts,
        ) from last_error

    async def _generate(self, model: str, prompt: str, timeout: float) -> str:
        """
        Issue one generateContent call and return the candidate text.

        Raises:
            ProviderFailure: TRANSPORT on timeout, HTTP or network errors;
                PARSE when the response envelope carries no text
        """
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.config.api_base}/models/{model}:generateContent",
                    headers={"x-goog-api-key": self.config.api_key},
                    json={
                        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                        "generationConfig": {
                            "temperature": self.config.temperature,
                            "topP": self.config.top_p,
                            "topK": self.config.top_k,
                            "maxOutputTokens": self.config.max_output_tokens,
                            "responseMimeType": "application/json",
                        },
                    },
                )
                response.raise_for_status()
                data = response.json()
                return data["candidates"][0]["content"]["parts"][0]["text"]

            except httpx.TimeoutException as e:
                raise ProviderFailure(model, FailureKind.TRANSPORT, f"timeout after {timeout:.1f}s") from e
            except httpx.HTTPStatusError as e:
                raise ProviderFailure(
                    model, FailureKind.TRANSPORT, f"HTTP {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise ProviderFailure(model, FailureKind.TRANSPORT, f"request failed: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise ProviderFailure(model, FailureKind.PARSE, f"unexpected response envelope: {e}") from e
