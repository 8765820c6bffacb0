"""
Insight store interface and in-memory implementation

The pattern insight service reads a user's analyses and cached insight
through InsightStore. Production deployments back it with their own
database; InMemoryInsightStore serves tests and local runs.
"""

import logging
from datetime import datetime
from typing import List, Optional, Protocol

from reflxy.exceptions import ValidationError
from reflxy.models.analysis import AnalysisSample
from reflxy.models.pattern import CachedPatternInsight

logger = logging.getLogger(__name__)


class InsightStore(Protocol):
    """Storage operations the pattern insight service depends on"""

    async def count_analyses(self, user_id: str) -> int:
        ...

    async def count_analyses_since(self, user_id: str, since: datetime) -> int:
        """Analyses created strictly after since"""
        ...

    async def recent_analyses(self, user_id: str, limit: int) -> List[AnalysisSample]:
        """Most recent analyses, newest first"""
        ...

    async def get_insight(self, user_id: str) -> Optional[CachedPatternInsight]:
        ...

    async def upsert_insight(self, insight: CachedPatternInsight) -> None:
        ...


class InMemoryInsightStore:
    """In-memory InsightStore (not persisted)"""

    def __init__(self) -> None:
        self._analyses: dict[str, List[AnalysisSample]] = {}
        self._insights: dict[str, CachedPatternInsight] = {}

    @staticmethod
    def _check_user(user_id: str) -> None:
        if not user_id:
            raise ValidationError("User ID cannot be empty", field="user_id", value=user_id)

    def add_analysis(self, user_id: str, sample: AnalysisSample) -> None:
        """Record an analysis for user_id"""
        self._check_user(user_id)
        self._analyses.setdefault(user_id, []).append(sample)

    async def count_analyses(self, user_id: str) -> int:
        self._check_user(user_id)
        return len(self._analyses.get(user_id, []))

    async def count_analyses_since(self, user_id: str, since: datetime) -> int:
        self._check_user(user_id)
        return sum(1 for sample in self._analyses.get(user_id, []) if sample.created_at > since)

    async def recent_analyses(self, user_id: str, limit: int) -> List[AnalysisSample]:
        self._check_user(user_id)
        samples = sorted(
            self._analyses.get(user_id, []),
            key=lambda sample: sample.created_at,
            reverse=True,
        )
        return samples[:limit]

    async def get_insight(self, user_id: str) -> Optional[CachedPatternInsight]:
        self._check_user(user_id)
        return self._insights.get(user_id)

    async def upsert_insight(self, insight: CachedPatternInsight) -> None:
        self._check_user(insight.user_id)
        self._insights[insight.user_id] = insight
        logger.debug(f"Stored {insight.pattern_type} insight for user {insight.user_id}")
