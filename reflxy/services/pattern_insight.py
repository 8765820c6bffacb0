"""
Pattern Insight Service

Produces the single pattern insight shown to a user:

1. Gate on total analysis count
2. Sample the most recent analyses
3. Compute stats and candidates, drop weak candidates
4. Pick one candidate (avoiding a repeat of the cached type)
5. Keep the cached insight unless the regeneration policy says otherwise
6. Rewrite the prose (template fallback) and store the new insight

The read-compute-write sequence runs under a per-user lock so two concurrent
requests for the same user cannot both regenerate and overwrite each other.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Optional, TypeVar

from reflxy.config import (
    MIN_ANALYSES,
    TARGET_ANALYSES,
    MAX_ANALYSES,
    MIN_PATTERN_STRENGTH,
    validate_config,
)
from reflxy.db.insight_store import InsightStore
from reflxy.exceptions import ReflxyError, StoreError
from reflxy.models.pattern import CachedPatternInsight, PATTERN_TYPES
from reflxy.observability.metrics import record_candidates, record_insight_outcome
from reflxy.services.insight_rewriter import InsightRewriter
from reflxy.services.pattern_detection import get_pattern_candidates
from reflxy.services.pattern_stats import compute_pattern_stats
from reflxy.services.pattern_surfacing import evaluate_regeneration, pick_pattern_candidate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PatternInsightService:
    """
    Service for generating and caching a user's pattern insight

    Features:
    - Minimum-data gating (no insight until enough analyses exist)
    - Bounded sampling window (target/max recent analyses)
    - Stable insights (cached text is served unless regeneration is warranted)
    - Per-user single-writer discipline
    """

    def __init__(
        self,
        store: InsightStore,
        rewriter: Optional[InsightRewriter] = None,
        min_analyses: int = MIN_ANALYSES,
        target_analyses: int = TARGET_ANALYSES,
        max_analyses: int = MAX_ANALYSES,
        min_strength: float = MIN_PATTERN_STRENGTH
    ) -> None:
        validate_config()
        if target_analyses > max_analyses:
            raise ValueError("target_analyses cannot exceed max_analyses")
        self.store = store
        self.rewriter = rewriter or InsightRewriter()
        self.min_analyses = min_analyses
        self.target_analyses = target_analyses
        self.max_analyses = max_analyses
        self.min_strength = min_strength
        # Per-user locks live only while a request holds or waits on them
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_holders: dict[str, int] = {}

    def window_size(self, total_count: int) -> int:
        """How many recent analyses to sample for a user with total_count analyses"""
        return min(self.max_analyses, max(self.target_analyses, total_count))

    async def get_insight(self, user_id: str) -> Optional[str]:
        """
        Return the insight to show user_id, or None when there is none this cycle.

        Args:
            user_id: User whose analyses are examined

        Returns:
            Insight text, either freshly generated or the cached one

        Raises:
            StoreError: If the insight store fails
            ReflxyError: If anything else in the pipeline fails
        """
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_holders[user_id] = self._lock_holders.get(user_id, 0) + 1
        try:
            async with lock:
                try:
                    return await self._get_insight_locked(user_id)
                except ReflxyError:
                    raise
                except Exception as e:
                    raise ReflxyError(
                        message=f"Pattern insight failed: {e}",
                        user_id=user_id,
                        operation="get_pattern_insight",
                        cause=e
                    ) from e
        finally:
            self._release_lock(user_id)

    def _release_lock(self, user_id: str) -> None:
        """Forget the user's lock once no request holds or waits on it"""
        self._lock_holders[user_id] -= 1
        if self._lock_holders[user_id] == 0:
            del self._lock_holders[user_id]
            del self._locks[user_id]

    async def _store_call(self, operation: str, user_id: str, call: Awaitable[T]) -> T:
        """Await a store call, reporting its failures as StoreError"""
        try:
            return await call
        except ReflxyError:
            raise
        except Exception as e:
            raise StoreError(
                message=f"Insight store {operation} failed: {e}",
                user_id=user_id,
                operation=operation,
                cause=e
            ) from e

    async def _get_insight_locked(self, user_id: str) -> Optional[str]:
        total_count = await self._store_call(
            "count_analyses", user_id, self.store.count_analyses(user_id)
        )
        if total_count < self.min_analyses:
            logger.info(
                f"Not enough analyses for pattern insight "
                f"(user {user_id} has {total_count}, need {self.min_analyses})"
            )
            record_insight_outcome("insufficient_data")
            return None

        samples = await self._store_call(
            "recent_analyses", user_id,
            self.store.recent_analyses(user_id, self.window_size(total_count))
        )
        stats = compute_pattern_stats(samples)
        candidates = get_pattern_candidates(samples, stats, min_strength=self.min_strength)
        record_candidates([candidate.type for candidate in candidates])

        existing = await self._store_call("get_insight", user_id, self.store.get_insight(user_id))
        if existing and existing.last_analysis_at:
            new_analyses = await self._store_call(
                "count_analyses_since", user_id,
                self.store.count_analyses_since(user_id, existing.last_analysis_at)
            )
        else:
            new_analyses = total_count

        last_type = None
        if existing and existing.pattern_type in PATTERN_TYPES:
            last_type = existing.pattern_type

        candidate = pick_pattern_candidate(candidates, last_type)
        if candidate is None:
            logger.info(f"No pattern candidate above {self.min_strength} for user {user_id}")
            record_insight_outcome("no_candidate")
            return None

        if existing:
            decision = evaluate_regeneration(candidate, new_analyses, existing)
            if not decision.regenerate:
                logger.info(f"Keeping cached insight for user {user_id}: {decision.reason}")
                record_insight_outcome("cached")
                return existing.insight
            logger.info(f"Regenerating insight for user {user_id}: {decision.reason}")

        insight = await self.rewriter.rewrite(candidate, stats)
        latest_analysis_at = samples[0].created_at if samples else datetime.now(timezone.utc)

        await self._store_call("upsert_insight", user_id, self.store.upsert_insight(CachedPatternInsight(
            user_id=user_id,
            insight=insight,
            fingerprint=candidate.fingerprint,
            analysis_count=total_count,
            last_analysis_at=latest_analysis_at,
            pattern_type=candidate.type,
            strength=candidate.strength,
        )))

        record_insight_outcome("regenerated" if existing else "created")
        return insight
