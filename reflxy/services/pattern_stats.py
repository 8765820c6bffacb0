"""
Pattern Statistics Aggregator

Reduces a window of analysis samples to a PatternStats snapshot. Every field
is an order-independent reduction, so the caller may pass samples newest-first
or oldest-first.
"""

import logging
from typing import Sequence

from reflxy.models.analysis import AnalysisSample, PatternStats, ScenarioAverage, SCENARIO_KEYS
from reflxy.services.statistical_analysis import (
    clamp,
    mean,
    std_dev,
    pearson_correlation,
    round_half_up,
)

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    """Number of non-empty whitespace-separated tokens"""
    return len(text.split()) if text else 0


def compute_risk_week(clarity: float, warmth: float, risk: float) -> float:
    """
    Project a message's emotional risk one week after it is read.

    Messages that start low on clarity or warmth, or that already carry risk,
    accumulate more residual risk. The result is clamped to 0-100.

    Example:
        >>> compute_risk_week(90, 90, 20)
        36
    """
    clarity_drift = (100 - clarity) / 100
    warmth_drift = (100 - warmth) / 100
    risk_amplify = risk / 100
    delta = round_half_up(12 + clarity_drift * 14 + warmth_drift * 12 + risk_amplify * 6)
    return clamp(risk + delta, 0, 100)


def _scenario_averages(samples: Sequence[AnalysisSample]) -> dict[str, ScenarioAverage]:
    totals = {key: [0, 0.0, 0.0, 0.0] for key in SCENARIO_KEYS}

    for sample in samples:
        scenario = sample.scenario.lower() if sample.scenario else None
        if scenario not in totals:
            continue
        entry = totals[scenario]
        entry[0] += 1
        entry[1] += sample.clarity
        entry[2] += sample.warmth
        entry[3] += sample.risk

    averages = {}
    for key, (count, clarity, warmth, risk) in totals.items():
        if count:
            averages[key] = ScenarioAverage(
                count=count,
                clarity=clarity / count,
                warmth=warmth / count,
                risk=risk / count,
            )
        else:
            averages[key] = ScenarioAverage()
    return averages


def compute_pattern_stats(samples: Sequence[AnalysisSample]) -> PatternStats:
    """
    Compute descriptive statistics over a window of analyses.

    Args:
        samples: Recent analyses for one user (window size is the caller's choice)

    Returns:
        PatternStats snapshot. An empty window yields all-zero statistics.
    """
    clarity_scores = [sample.clarity for sample in samples]
    warmth_scores = [sample.warmth for sample in samples]
    risk_scores = [sample.risk for sample in samples]
    word_counts = [count_words(sample.text) for sample in samples]
    risk_week_scores = [
        compute_risk_week(sample.clarity, sample.warmth, sample.risk)
        for sample in samples
    ]

    risk_now_avg = mean(risk_scores)
    risk_week_avg = mean(risk_week_scores)

    stats = PatternStats(
        count=len(samples),
        avg_clarity=mean(clarity_scores),
        avg_warmth=mean(warmth_scores),
        avg_risk=mean(risk_scores),
        avg_words=mean(word_counts),
        std_clarity=std_dev(clarity_scores),
        std_warmth=std_dev(warmth_scores),
        std_risk=std_dev(risk_scores),
        std_words=std_dev(word_counts),
        corr_words_clarity=pearson_correlation(word_counts, clarity_scores),
        corr_words_warmth=pearson_correlation(word_counts, warmth_scores),
        risk_now_avg=risk_now_avg,
        risk_week_avg=risk_week_avg,
        risk_delta=risk_week_avg - risk_now_avg,
        scenario_averages=_scenario_averages(samples),
    )

    logger.debug(
        f"Computed pattern stats over {stats.count} analyses "
        f"(risk_delta={stats.risk_delta:.2f}, std_words={stats.std_words:.2f})"
    )
    return stats
