"""Rephrase templated pattern insights with a text generation model"""
import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from reflxy.config import (
    OPENAI_API_KEY,
    INSIGHT_MODEL,
    INSIGHT_REWRITE_TIMEOUT,
    INSIGHT_MAX_LENGTH,
)
from reflxy.exceptions import InsightRewriteError, wrap_external_exception
from reflxy.models.analysis import PatternStats
from reflxy.models.pattern import PatternCandidate
from reflxy.observability.metrics import record_rewrite
from reflxy.resilience.fallback import FallbackStrategy, execute_with_fallbacks
from reflxy.services.pattern_detection import OPENERS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = " ".join([
    "You generate a single reflective insight for Reflxy.",
    "Do NOT give advice, coaching, or instructions.",
    "Do NOT judge the user or score them as good or bad.",
    "Do NOT reference raw message text.",
    "Use one of these openers exactly: " + ", ".join(f"'{opener}'" for opener in OPENERS) + ".",
    "Max 2 sentences. Calm, observational, and non-judgmental.",
    'Return ONLY JSON: {"insight":"..."}',
])


def build_rewrite_payload(candidate: PatternCandidate, stats: PatternStats) -> Dict[str, Any]:
    """Candidate plus rounded stats, without any raw message text"""
    return {
        "candidate": candidate.model_dump(),
        "stats": {
            "count": stats.count,
            "avg_clarity": round(stats.avg_clarity, 1),
            "avg_warmth": round(stats.avg_warmth, 1),
            "avg_risk": round(stats.avg_risk, 1),
            "avg_words": round(stats.avg_words, 1),
            "std_clarity": round(stats.std_clarity, 1),
            "std_warmth": round(stats.std_warmth, 1),
            "std_risk": round(stats.std_risk, 1),
            "corr_words_clarity": round(stats.corr_words_clarity, 2),
            "corr_words_warmth": round(stats.corr_words_warmth, 2),
            "risk_now_avg": round(stats.risk_now_avg, 1),
            "risk_week_avg": round(stats.risk_week_avg, 1),
            "scenario_averages": {
                key: value.model_dump() for key, value in stats.scenario_averages.items()
            },
        },
    }


def is_acceptable_rewrite(text: Optional[str], max_length: int = INSIGHT_MAX_LENGTH) -> bool:
    """A rewrite must be non-empty, short enough, and keep one of the fixed openers"""
    if not isinstance(text, str):
        return False
    text = text.strip()
    return bool(text) and len(text) <= max_length and text.startswith(OPENERS)


class InsightRewriter:
    """
    Optional prose rewrite step for pattern insights.

    The templated sentence on the candidate is always the fallback: a missing
    API key, a timeout, an API error, or a rewrite that drops the required
    opener all return the template. rewrite() never raises.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = INSIGHT_MODEL,
        timeout: float = INSIGHT_REWRITE_TIMEOUT,
        max_length: int = INSIGHT_MAX_LENGTH
    ):
        if client is None and OPENAI_API_KEY:
            client = AsyncOpenAI(api_key=OPENAI_API_KEY)
        self.client = client
        self.model = model
        self.timeout = timeout
        self.max_length = max_length

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def rewrite(self, candidate: PatternCandidate, stats: PatternStats) -> str:
        """
        Rephrase candidate.insight, falling back to the template.

        Args:
            candidate: Selected pattern candidate
            stats: Stats the candidate was derived from (sent as context)

        Returns:
            The rewritten insight, or candidate.insight
        """
        if not self.enabled:
            record_rewrite("disabled")
            return candidate.insight

        strategies = [
            FallbackStrategy("openai_rewrite", self._rewrite_with_openai, priority=1),
            FallbackStrategy("template", self._use_template, priority=2),
        ]
        return await execute_with_fallbacks(strategies, candidate, stats)

    async def _use_template(self, candidate: PatternCandidate, stats: PatternStats) -> str:
        return candidate.insight

    async def _rewrite_with_openai(self, candidate: PatternCandidate, stats: PatternStats) -> str:
        payload = build_rewrite_payload(candidate, stats)
        started = time.monotonic()

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    temperature=0.2,  # Low temperature for consistency
                    response_format={"type": "json_object"},
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {
                            "role": "user",
                            "content": (
                                "Use the candidate as the primary observation and rephrase it "
                                f"with the required opener. Data:\n{json.dumps(payload)}"
                            ),
                        },
                    ],
                ),
                timeout=self.timeout,
            )
        except Exception as e:
            record_rewrite("error", time.monotonic() - started)
            raise wrap_external_exception(e, operation="rewrite_insight") from e

        duration = time.monotonic() - started
        content = (response.choices[0].message.content if response.choices else None) or "{}"

        try:
            insight = json.loads(content).get("insight")
        except (json.JSONDecodeError, AttributeError) as e:
            record_rewrite("rejected", duration)
            raise InsightRewriteError(
                message="Rewrite response was not a JSON object",
                operation="rewrite_insight",
                cause=e
            ) from e

        if not is_acceptable_rewrite(insight, self.max_length):
            record_rewrite("rejected", duration)
            raise InsightRewriteError(
                message="Rewrite missing required opener or too long",
                operation="rewrite_insight",
            )

        record_rewrite("success", duration)
        logger.info(f"Rewrote {candidate.type} insight in {duration:.2f}s")
        return insight.strip()
