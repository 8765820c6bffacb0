"""
Prometheus metrics definitions for reflxy.

This module defines the metrics collected around pattern insights:
- Insight requests by outcome (cached, regenerated, created, skipped)
- Candidates produced per pattern type
- Text rewrite calls, durations, and fallbacks

Metrics are registered on the default prometheus_client registry; exposing
them is left to the host application.
"""

import logging
from typing import Optional
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# Pattern Insight Metrics
# =============================================================================

pattern_insight_requests_total = Counter(
    "pattern_insight_requests_total",
    "Total pattern insight requests",
    ["outcome"],  # insufficient_data/no_candidate/cached/regenerated/created
)

pattern_candidates_total = Counter(
    "pattern_candidates_total",
    "Pattern candidates that passed the strength floor",
    ["pattern_type"],
)

# =============================================================================
# External API Metrics
# =============================================================================

insight_rewrite_total = Counter(
    "insight_rewrite_total",
    "Insight rewrite attempts through the text generation API",
    ["status"],  # success/rejected/error/disabled
)

insight_rewrite_duration_seconds = Histogram(
    "insight_rewrite_duration_seconds",
    "Duration of insight rewrite calls in seconds",
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, float("inf")),
)

# Labels: primary strategy, fallback strategy, status (success/failure)
fallback_executions_total = Counter(
    "fallback_executions_total",
    "Total number of fallback strategy executions",
    ["primary_api", "fallback_strategy", "status"],
)


# =============================================================================
# Helpers
# =============================================================================

def record_insight_outcome(outcome: str) -> None:
    """Count one pattern insight request by outcome"""
    pattern_insight_requests_total.labels(outcome=outcome).inc()


def record_candidates(pattern_types: list[str]) -> None:
    """Count candidates per pattern type"""
    for pattern_type in pattern_types:
        pattern_candidates_total.labels(pattern_type=pattern_type).inc()


def record_rewrite(status: str, duration: Optional[float] = None) -> None:
    """Count an insight rewrite attempt and observe its duration"""
    insight_rewrite_total.labels(status=status).inc()
    if duration is not None:
        insight_rewrite_duration_seconds.observe(duration)


def record_fallback(primary_api: str, fallback_strategy: str, success: bool) -> None:
    """Record a fallback strategy execution"""
    status = "success" if success else "failure"
    fallback_executions_total.labels(
        primary_api=primary_api,
        fallback_strategy=fallback_strategy,
        status=status,
    ).inc()
    logger.debug(f"Fallback {fallback_strategy} for {primary_api}: {status}")
