"""
Service Layer Package

Pattern insight engine:
- statistical_analysis: mean, standard deviation, correlation, percentiles
- pattern_stats: reduce analyses to a PatternStats snapshot
- pattern_detection: evaluate the four pattern hypotheses
- pattern_surfacing: candidate selection and regeneration policy

Integration:
- insight_rewriter: optional text generation rewrite with template fallback
- pattern_insight: PatternInsightService tying the engine to an InsightStore
"""

from reflxy.services.pattern_stats import compute_pattern_stats
from reflxy.services.pattern_detection import get_pattern_candidates
from reflxy.services.pattern_surfacing import pick_pattern_candidate, should_regenerate
from reflxy.services.pattern_insight import PatternInsightService

__all__ = [
    "compute_pattern_stats",
    "get_pattern_candidates",
    "pick_pattern_candidate",
    "should_regenerate",
    "PatternInsightService",
]
