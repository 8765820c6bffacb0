"""
Pattern Surfacing Service

Decides which pattern candidate to show and whether it should replace the
insight the user already has. Both decisions favor stability:

- Selection avoids repeating the last shown pattern type when a different
  type is nearly as strong
- Regeneration keeps the cached insight unless enough new analyses arrived
  or the new candidate is materially different and stronger

This keeps the displayed insight from flickering between near-equal
hypotheses on every new message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from reflxy.models.pattern import CachedPatternInsight, PatternCandidate, PatternType

logger = logging.getLogger(__name__)

# An alternative of a different type is preferred over a repeat when it is
# at least this fraction of the top candidate's strength
ANTI_REPEAT_RATIO = 0.9

# Regeneration thresholds
REGENERATE_AFTER_ANALYSES = 3
FINGERPRINT_STRENGTH_DELTA = 0.12
TYPE_CHANGE_STRENGTH_GAIN = 0.1


@dataclass
class RegenerationDecision:
    """Decision whether to replace a cached insight"""
    regenerate: bool
    reason: str


def pick_pattern_candidate(
    candidates: Sequence[PatternCandidate],
    last_type: Optional[PatternType] = None
) -> Optional[PatternCandidate]:
    """
    Pick the strongest candidate, avoiding an immediate repeat of last_type.

    Args:
        candidates: Qualifying candidates (may be empty or tied)
        last_type: Pattern type of the insight shown last time, if any

    Returns:
        The chosen candidate, or None if there are none

    Example:
        >>> pick_pattern_candidate([temporal_60, scenario_58], last_type="temporal")
        scenario_58  # 0.58 >= 0.9 * 0.60, so the repeat is avoided
    """
    if not candidates:
        return None

    # sorted() is stable, so ties keep hypothesis order
    ranked = sorted(candidates, key=lambda candidate: candidate.strength, reverse=True)
    top = ranked[0]

    if last_type and top.type == last_type:
        for alternative in ranked[1:]:
            if (
                alternative.type != last_type
                and alternative.strength >= top.strength * ANTI_REPEAT_RATIO
            ):
                logger.debug(
                    f"Skipping repeat of '{last_type}' pattern in favor of '{alternative.type}' "
                    f"({alternative.strength:.2f} vs {top.strength:.2f})"
                )
                return alternative

    return top


def evaluate_regeneration(
    candidate: PatternCandidate,
    new_analyses: int,
    existing: CachedPatternInsight
) -> RegenerationDecision:
    """
    Decide whether candidate should replace the cached insight.

    Rules, in order:
    1. 3+ analyses since the cached insight was generated -> regenerate
    2. Different fingerprint and strength moved by >= 0.12 -> regenerate
    3. Different pattern type -> regenerate only if >= 0.1 stronger
    4. Otherwise keep the cached insight

    Args:
        candidate: Newly selected candidate
        new_analyses: Analyses created since the cached insight was generated
        existing: The cached insight

    Returns:
        RegenerationDecision with the rule that decided it
    """
    if new_analyses >= REGENERATE_AFTER_ANALYSES:
        return RegenerationDecision(True, f"{new_analyses} new analyses since last insight")

    existing_strength = existing.strength or 0.0
    strength_delta = abs(existing_strength - candidate.strength)
    if candidate.fingerprint != existing.fingerprint and strength_delta >= FINGERPRINT_STRENGTH_DELTA:
        return RegenerationDecision(
            True,
            f"fingerprint changed ({existing.fingerprint} -> {candidate.fingerprint}), "
            f"strength moved by {strength_delta:.2f}"
        )

    if existing.pattern_type and existing.pattern_type != candidate.type:
        if candidate.strength >= existing_strength + TYPE_CHANGE_STRENGTH_GAIN:
            return RegenerationDecision(
                True,
                f"pattern type changed ({existing.pattern_type} -> {candidate.type}) with stronger evidence"
            )
        return RegenerationDecision(False, "pattern type changed without enough strength gain")

    return RegenerationDecision(False, "cached insight still representative")


def should_regenerate(
    candidate: PatternCandidate,
    new_analyses: int,
    existing: CachedPatternInsight
) -> bool:
    """True if candidate should overwrite the cached insight"""
    return evaluate_regeneration(candidate, new_analyses, existing).regenerate
