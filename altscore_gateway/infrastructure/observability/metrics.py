"""Prometheus metrics for monitoring grade distribution, explanation fallbacks, and persistence"""

from prometheus_client import Counter, Histogram

# Scoring metrics
report_counter = Counter(
    "altscore_reports_total",
    "Total scoring runs completed",
    ["outcome"],  # explained | degraded
)

grade_counter = Counter(
    "altscore_grade_total",
    "Scores issued by grade band",
    ["grade"],  # A, B+, B, C, D
)

# Explanation metrics
explanation_attempts_counter = Counter(
    "altscore_explanation_attempts_total",
    "Generative model calls by candidate and outcome",
    ["model", "outcome"],  # success | transport | parse | validation | deadline
)

explanation_latency_histogram = Histogram(
    "altscore_explanation_latency_seconds",
    "Generative model response time per candidate",
    ["model"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0],
)

explanation_exhausted_counter = Counter(
    "altscore_explanation_exhausted_total",
    "Scoring runs where every model candidate failed",
)

# Persistence metrics
persistence_failures_counter = Counter(
    "altscore_persistence_failures_total",
    "Failed report saves",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(grade: str, explained: bool) -> None:
    """Record scoring outcome for monitoring grade distribution and degraded runs"""
    outcome = "explained" if explained else "degraded"
    report_counter.labels(outcome=outcome).inc()
    grade_counter.labels(grade=grade).inc()
