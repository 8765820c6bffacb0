"""
Pattern Detection Service

This module implements 4 pattern hypotheses that are evaluated against a
user's recent analyses:

1. Temporal drift (risk projected a week out vs. risk in the moment)
2. Message length correlation (word count vs. warmth or clarity)
3. Scenario divergence (bosses vs. partners vs. clients)
4. Score consistency (steady vs. volatile signature)

Each hypothesis emits at most one PatternCandidate. Several may qualify at
once; choosing between them is the job of pattern_surfacing.

Insight sentences are templated, never random: the opener is fixed per
hypothesis so identical input always produces identical output.
"""

import logging
from itertools import combinations
from typing import List, Optional, Sequence

from reflxy.models.analysis import AnalysisSample, PatternStats, Scenario
from reflxy.models.pattern import PatternCandidate
from reflxy.services.pattern_stats import count_words
from reflxy.services.statistical_analysis import (
    clamp,
    mean,
    percentile,
    round_to_nearest,
)

logger = logging.getLogger(__name__)

OPENERS = (
    "Your messages tend to",
    "Over time, your communication shows",
    "A recurring pattern in your messages is",
)

# Temporal drift
TEMPORAL_MIN_DELTA = 8
TEMPORAL_FULL_STRENGTH_DELTA = 25

# Length correlation
LENGTH_MIN_STD_WORDS = 8
LENGTH_MIN_CORRELATION = 0.35

# Scenario divergence
SCENARIO_MIN_SAMPLES = 2
SCENARIO_MIN_DIFF = 10
SCENARIO_FULL_STRENGTH_DIFF = 25

# Consistency bands (the range between them is inconclusive)
CONSISTENCY_STEADY_MAX = 7
CONSISTENCY_VOLATILE_MIN = 15

SCENARIO_LABELS: dict[Scenario, str] = {
    "boss": "bosses",
    "partner": "partners",
    "client": "clients",
}

METRIC_LABELS = {
    "clarity": "clearer",
    "warmth": "warmer",
    "risk": "more emotionally weighted",
}


def opener_for(slot: int) -> str:
    """Fixed sentence opener for a hypothesis slot"""
    return OPENERS[slot % len(OPENERS)]


# ================================================================
# Hypothesis 1: Temporal Drift
# ================================================================

def detect_temporal_pattern(stats: PatternStats) -> Optional[PatternCandidate]:
    """
    Detect whether risk builds after a message is read or peaks immediately.

    Qualifies when the projected one-week risk differs from the immediate
    risk by at least 8 points on average.
    """
    temporal_diff = stats.risk_delta
    if abs(temporal_diff) < TEMPORAL_MIN_DELTA:
        return None

    delayed = temporal_diff > 0
    if delayed:
        observation = "more risk after the first read than in the moment"
    else:
        observation = "tension that shows up immediately rather than later"

    direction = "delayed" if delayed else "immediate"
    magnitude = round_to_nearest(abs(temporal_diff), 2)

    return PatternCandidate(
        type="temporal",
        insight=f"{opener_for(0)} {observation}.",
        strength=clamp(abs(temporal_diff) / TEMPORAL_FULL_STRENGTH_DELTA),
        fingerprint=f"temporal:{direction}:{magnitude}",
        metadata={"temporal_diff": round(temporal_diff, 2)},
    )


# ================================================================
# Hypothesis 2: Message Length Correlation
# ================================================================

def detect_length_pattern(
    samples: Sequence[AnalysisSample],
    stats: PatternStats
) -> Optional[PatternCandidate]:
    """
    Detect whether message length tracks warmth or clarity.

    Requires enough spread in word counts (std >= 8) and a correlation of at
    least 0.35 in absolute value. The metric with the stronger correlation is
    reported; warmth wins ties.

    A negative correlation means longer messages score lower, so the 75th
    percentile word count is reported as the point where the metric softens.
    A positive correlation means shorter messages score lower, so the 30th
    percentile is reported as the ambiguity threshold.
    """
    if stats.std_words < LENGTH_MIN_STD_WORDS:
        return None

    if abs(stats.corr_words_warmth) >= abs(stats.corr_words_clarity):
        metric, corr = "warmth", stats.corr_words_warmth
    else:
        metric, corr = "clarity", stats.corr_words_clarity

    if abs(corr) < LENGTH_MIN_CORRELATION:
        return None

    word_counts = [count_words(sample.text) for sample in samples]
    longer = corr < 0
    if longer:
        threshold = round_to_nearest(percentile(word_counts, 0.75), 10)
        observation = f"{metric} softens when messages exceed ~{threshold} words"
    else:
        threshold = round_to_nearest(percentile(word_counts, 0.3), 10)
        observation = f"more ambiguity in shorter messages under ~{threshold} words"

    return PatternCandidate(
        type="length",
        insight=f"{opener_for(1)} {observation}.",
        strength=clamp(abs(corr)),
        fingerprint=f"length:{metric}:{'longer' if longer else 'shorter'}:{threshold}",
        metadata={"corr": round(corr, 2), "threshold": threshold},
    )


# ================================================================
# Hypothesis 3: Scenario Divergence
# ================================================================

def detect_scenario_pattern(stats: PatternStats) -> Optional[PatternCandidate]:
    """
    Detect a score gap between relationship scenarios.

    Only scenarios with at least 2 samples take part, and at least two of them
    must qualify. Every (pair, metric) combination with an absolute gap of 10
    or more is scored; only the single strongest is returned. Strength
    saturates at a 25 point gap, so saturated ties go to the larger raw gap.
    """
    scenarios = [
        (key, value)
        for key, value in stats.scenario_averages.items()
        if value.count >= SCENARIO_MIN_SAMPLES
    ]
    if len(scenarios) < 2:
        return None

    best: Optional[PatternCandidate] = None
    best_gap = 0.0

    for (a_key, a_value), (b_key, b_value) in combinations(scenarios, 2):
        for metric in ("clarity", "warmth", "risk"):
            diff = getattr(a_value, metric) - getattr(b_value, metric)
            gap = abs(diff)
            if gap < SCENARIO_MIN_DIFF:
                continue

            higher, lower = (a_key, b_key) if diff > 0 else (b_key, a_key)
            strength = clamp(gap / SCENARIO_FULL_STRENGTH_DIFF)

            if best is not None and (strength, gap) <= (best.strength, best_gap):
                continue

            best_gap = gap
            best = PatternCandidate(
                type="scenario",
                insight=(
                    f"{opener_for(2)} {METRIC_LABELS[metric]} messages with "
                    f"{SCENARIO_LABELS[higher]} than with {SCENARIO_LABELS[lower]}."
                ),
                strength=strength,
                fingerprint=f"scenario:{metric}:{higher}:{lower}:{round_to_nearest(gap, 5)}",
                metadata={
                    "diff": round(diff, 2),
                    "metric": metric,
                    "higher": higher,
                    "lower": lower,
                },
            )

    return best


# ================================================================
# Hypothesis 4: Score Consistency
# ================================================================

def detect_consistency_pattern(stats: PatternStats) -> Optional[PatternCandidate]:
    """
    Detect a steady or volatile score signature.

    Uses the mean of the clarity, warmth, and risk standard deviations:
    <= 7 is steady, >= 15 is volatile, anything in between yields nothing.
    """
    avg_std = mean([stats.std_clarity, stats.std_warmth, stats.std_risk])

    if avg_std <= CONSISTENCY_STEADY_MAX:
        return PatternCandidate(
            type="consistency",
            insight=f"{opener_for(0)} a steady signature across clarity, warmth, and risk.",
            strength=clamp((CONSISTENCY_STEADY_MAX - avg_std) / CONSISTENCY_STEADY_MAX),
            fingerprint="consistency:steady",
            metadata={"avg_std": round(avg_std, 2)},
        )

    if avg_std >= CONSISTENCY_VOLATILE_MIN:
        return PatternCandidate(
            type="consistency",
            insight=f"{opener_for(2)} noticeable shifts in clarity, warmth, and risk between messages.",
            strength=clamp((avg_std - CONSISTENCY_VOLATILE_MIN) / CONSISTENCY_VOLATILE_MIN),
            fingerprint="consistency:variable",
            metadata={"avg_std": round(avg_std, 2)},
        )

    return None


def get_pattern_candidates(
    samples: Sequence[AnalysisSample],
    stats: PatternStats,
    min_strength: float = 0.0
) -> List[PatternCandidate]:
    """
    Evaluate every hypothesis and collect the ones that qualify.

    Args:
        samples: The analyses stats was computed from
        stats: Snapshot from compute_pattern_stats(samples)
        min_strength: Drop candidates weaker than this (the host uses 0.35)

    Returns:
        Candidates in hypothesis order: temporal, length, scenario, consistency

    Example:
        >>> stats = compute_pattern_stats(samples)
        >>> candidates = get_pattern_candidates(samples, stats, min_strength=0.35)
    """
    detected = [
        detect_temporal_pattern(stats),
        detect_length_pattern(samples, stats),
        detect_scenario_pattern(stats),
        detect_consistency_pattern(stats),
    ]
    candidates = [
        candidate for candidate in detected
        if candidate is not None and candidate.strength >= min_strength
    ]

    logger.debug(
        f"Pattern candidates for {stats.count} analyses: "
        f"{[(c.type, round(c.strength, 2)) for c in candidates]}"
    )
    return candidates
